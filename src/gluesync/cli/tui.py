"""Terminal UI utilities for picking tables to sync."""

from __future__ import annotations

import questionary

from gluesync.cli.common.output import out
from gluesync.core.batch import TableSyncEntry

_MAX_SOURCE_NAME_WIDTH = 64


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _entry_choice_title(entry: TableSyncEntry, *, name_width: int) -> str:
    """Format one entry as `<source>  -> <db.table>` with an aligned target column."""
    short_name = _truncate(entry.source_table, _MAX_SOURCE_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  -> {entry.target.full_name}"


def select_entries(entries: list[TableSyncEntry]) -> list[TableSyncEntry]:
    """Display a checkbox prompt to select driving-list entries.

    Args:
        entries: Entries to choose from.

    Returns:
        The selected entries, or an empty list if none selected.
    """
    shown_names = [_truncate(s.source_table, _MAX_SOURCE_NAME_WIDTH) for s in entries]
    name_width = max((len(name) for name in shown_names), default=0)

    choices = [
        questionary.Choice(
            title=_entry_choice_title(entry, name_width=name_width),
            value=entry,
        )
        for entry in entries
    ]
    return out.select_many("Select tables to sync:", choices)
