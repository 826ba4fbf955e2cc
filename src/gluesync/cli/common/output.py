"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from gluesync.cli.common.tui_style import (
    SYNC_CONFIRM_STYLE,
    TABLE_PICKER_STYLE,
)

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)
err_console = Console(theme=_THEME, stderr=True)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "checked_icon", "unchecked_icon", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts so they read consistently."""
        return f"[gluesync] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def select_many(self, message: str, choices: list[Any]) -> list[Any]:
        """
        Prompt the user to select multiple items from a list.

        Accepts plain strings or ``questionary.Choice`` objects and returns the
        selected values.
        """
        if not choices:
            return []

        prompt = self._q_try(
            questionary.checkbox,
            self._q(message),
            choices=choices,
            style=TABLE_PICKER_STYLE,
            qmark="✦",
            instruction="Use ↑/↓, space, a (all), i (invert), enter",
            pointer="❯",
            checked_icon="▣",
            unchecked_icon="▢",
        )
        picked = prompt.ask()
        return list(picked or [])

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask the user for confirmation using a standardized Questionary prompt."""
        # Questionary renders `instruction=...` inline next to the echoed answer.
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=SYNC_CONFIRM_STYLE,
            qmark="✦",
            auto_enter=False,
            pointer="❯",
        )
        return bool(prompt.ask())

    def columns_table(self, columns: Iterable[Any], title: str = "Columns") -> None:
        """
        Expects objects with .name and .type (like gluesync.core.glue.ColumnDef)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("#", style="meta", no_wrap=True)
        t.add_column("Name", style="ok")
        t.add_column("Type")

        for i, c in enumerate(columns, start=1):
            t.add_row(str(i), c.name, c.type)

        console.print(t)

    def warnings(self, warnings: Iterable[str]) -> None:
        """Print parser/mapper warnings, one per line."""
        for w in warnings:
            self.warn(w)

    def entries_table(self, entries: Iterable[Any], title: str = "Tables") -> None:
        """
        Expects TableSyncEntry-like objects with .source_table, .target and .stream
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Source table", style="ok")
        t.add_column("Target table")
        t.add_column("Stream", style="meta")

        for s in entries:
            t.add_row(s.source_table, s.target.full_name, s.stream or "")

        console.print(t)

    def results_table(self, results: Iterable[Any], title: str = "Results") -> None:
        """
        Expects ReconcileResult-like objects with .identity, .code, .ok,
        .committed and .message
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Table", style="ok")
        t.add_column("Code", no_wrap=True)
        t.add_column("Message")

        for r in results:
            if r.ok:
                style = "ok"
            elif r.committed:
                style = "warn"
            else:
                style = "err"
            code = r.code.value if hasattr(r.code, "value") else str(r.code)
            t.add_row(r.identity.full_name, f"[{style}]{code}[/{style}]", r.message)

        console.print(t)

    def result(self, result: Any) -> None:
        """Print a single reconciliation result with its warnings."""
        self.warnings(result.warnings)
        if result.ok:
            self.success(result.message)
        elif result.committed:
            self.warn(result.message)
        else:
            self.error(result.message)


out = Out()
