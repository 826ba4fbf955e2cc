"""Progress formatting utilities for the CLI."""

from __future__ import annotations

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from gluesync.cli.common.output import err_console
from gluesync.core.batch import SourceTableReader, TableSyncEntry, reconcile_tables
from gluesync.core.reconcile import Reconciler, ReconcileResult

_MAX_TABLE_NAME_WIDTH = 56


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _display_result_label(result: ReconcileResult) -> str:
    """Render the last-finished line: ``<code> <db.table>``."""
    return f"{result.code.value} {_truncate(result.identity.full_name, _MAX_TABLE_NAME_WIDTH)}"


def reconcile_with_progress(
    reconciler: Reconciler,
    source: SourceTableReader,
    entries: list[TableSyncEntry],
    max_parallel: int,
) -> list[ReconcileResult]:
    """
    Reconcile all tables while showing:
      - an overall progress bar (x/y completed + failures)
      - the most recently finished table with its result code

    Returns one result per entry, in input order.
    """
    failures = 0

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]Tables[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("failures=[bold red]{task.fields[failures]}[/]"),
        TextColumn("[dim]{task.fields[last]}[/]"),
        TimeElapsedColumn(),
        console=err_console,
        transient=True,
    )
    task_id = progress.add_task("tables", total=max(len(entries), 1), failures=0, last="")

    def _on_result(result: ReconcileResult) -> None:
        nonlocal failures
        if not result.ok:
            failures += 1
        progress.update(
            task_id,
            advance=1,
            failures=failures,
            last=_display_result_label(result),
        )

    with progress:
        results = reconcile_tables(
            reconciler,
            source,
            entries,
            max_parallel,
            on_result=_on_result,
        )

    return results
