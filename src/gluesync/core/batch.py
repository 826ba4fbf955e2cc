"""Bulk reconciliation driven by a list of tables.

The driving list names, per source table, the catalog database/table it is
synced into and optionally the stream to acknowledge afterwards. Tables are
independent of each other, so they are reconciled in parallel; a failure in
one table is reported in its own result and never aborts the others.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

from gluesync.core.errors import ResultCode, SourceUnavailable
from gluesync.core.glue import TableIdentity
from gluesync.core.reconcile import Reconciler, ReconcileResult, Stage

logger = logging.getLogger(__name__)


class SourceTableReader(Protocol):
    """Interface for reading the source side of a sync."""

    def table_ddl(self, table_full_name: str) -> str:
        """Return the DDL text of a source table."""
        ...

    def metadata_location(self, table_full_name: str) -> str:
        """Return the current snapshot pointer of a source table."""
        ...


@dataclass(frozen=True)
class TableSyncEntry:
    """
    One entry of the driving list.

    Attributes:
        source_table: Fully qualified source table name.
        target: Catalog database/table to reconcile.
        stream: Optional change-log handle to acknowledge after the write.
    """

    source_table: str
    target: TableIdentity
    stream: str | None = None


def _require_str(item: dict[str, Any], key: str, index: int) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Entry {index}: '{key}' must be a non-empty string.")
    return value.strip()


def parse_table_list(items: Any) -> list[TableSyncEntry]:
    """Validate a decoded driving list; disabled entries are dropped."""
    if not isinstance(items, list):
        raise ValueError("Table list must be a JSON array of objects.")

    entries: list[TableSyncEntry] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"Entry {index}: expected an object.")
        if item.get("enabled", True) is False:
            continue
        stream = item.get("stream")
        if stream is not None and (not isinstance(stream, str) or not stream.strip()):
            raise ValueError(f"Entry {index}: 'stream' must be a non-empty string.")
        entries.append(
            TableSyncEntry(
                source_table=_require_str(item, "source_table", index),
                target=TableIdentity(
                    database=_require_str(item, "target_database", index),
                    table=_require_str(item, "target_table", index),
                ),
                stream=stream.strip() if stream else None,
            )
        )
    return entries


def load_table_list(path: Path) -> list[TableSyncEntry]:
    """Read and validate a driving list from a JSON file."""
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc})") from exc
    return parse_table_list(payload)


def reconcile_entry(
    reconciler: Reconciler,
    source: SourceTableReader,
    entry: TableSyncEntry,
) -> ReconcileResult:
    """Read the source side of one entry and reconcile it."""
    try:
        ddl = source.table_ddl(entry.source_table)
        pointer = source.metadata_location(entry.source_table)
    except Exception as exc:  # noqa: BLE001 - keep the batch going; report per table
        error = SourceUnavailable(
            f"Could not read source table '{entry.source_table}': {exc}"
        )
        logger.error("%s", error)
        return ReconcileResult(
            identity=entry.target,
            code=ResultCode.SOURCE_UNAVAILABLE,
            message=(
                f"{ResultCode.SOURCE_UNAVAILABLE.value}: Failed to reconcile table "
                f"'{entry.target.full_name}'. SourceUnavailable: {error}"
            ),
            stage=Stage.ERROR,
            failed_at=Stage.START,
            error=str(error),
        )

    return reconciler.reconcile(
        entry.target.database,
        entry.target.table,
        ddl,
        pointer,
        entry.stream,
    )


def reconcile_tables(
    reconciler: Reconciler,
    source: SourceTableReader,
    entries: list[TableSyncEntry],
    max_parallel: int,
    on_result: Callable[[ReconcileResult], None] | None = None,
) -> list[ReconcileResult]:
    """
    Reconcile many tables in parallel.

    Args:
        reconciler: Reconciler shared by all workers.
        source: Reader for source DDL and snapshot pointers.
        entries: Driving list entries.
        max_parallel: Maximum number of tables reconciled concurrently.
        on_result: Optional callback invoked as each table finishes.

    Returns:
        One result per entry, in the order of ``entries``.
    """
    if max_parallel < 1:
        raise ValueError("max_parallel must be >= 1")
    if not entries:
        return []

    results: list[ReconcileResult | None] = [None] * len(entries)

    with ThreadPoolExecutor(max_workers=max_parallel) as pool:
        futures = {
            pool.submit(reconcile_entry, reconciler, source, entry): index
            for index, entry in enumerate(entries)
        }
        for future in as_completed(futures):
            result = future.result()
            results[futures[future]] = result
            if on_result is not None:
                on_result(result)

    return [r for r in results if r is not None]
