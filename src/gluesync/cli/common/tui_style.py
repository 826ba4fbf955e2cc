"""Prompt styles for gluesync.

Both prompts share the muted chrome (checkbox frames, separators, hints) and
differ only in their accent: table selection is green on a cyan question,
the sync confirmation is yellow so it stands out before catalog writes.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

_MUTED = "ansibrightblack"

_BASE: dict[str, str] = {
    "checkbox": _MUTED,
    "separator": _MUTED,
    "instruction": _MUTED,
    "disabled": _MUTED,
    "error": "bold ansired",
}


def _prompt_style(question: str, accent: str) -> Style:
    """Build a prompt style from a question colour and an accent colour."""
    accented = {
        key: f"bold {accent}"
        for key in ("answer", "pointer", "highlighted", "selected", "checkbox-selected")
    }
    return Style.from_dict({**_BASE, "question": f"bold {question}", **accented})


TABLE_PICKER_STYLE = _prompt_style("ansicyan", "ansibrightgreen")
SYNC_CONFIRM_STYLE = _prompt_style("ansiyellow", "ansiyellow")
