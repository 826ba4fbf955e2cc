"""Column-list extraction from source table DDL.

Only the constrained shape produced by ``GET_DDL('table', ...)`` is supported:
a single parenthesized column list between the first ``(`` and the last ``)``.
This is not a SQL parser; anything outside that column list is ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from gluesync.core.errors import MalformedDDL
from gluesync.core.glue import ColumnDef
from gluesync.core.typemap import map_type

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"\s*,\s*")


@dataclass(frozen=True)
class ParsedSchema:
    """Columns mapped from a DDL text plus the non-fatal warnings raised on the way."""

    columns: tuple[ColumnDef, ...]
    warnings: tuple[str, ...] = ()


def extract_column_block(table_ddl: str) -> str:
    """
    Return the text between the first ``(`` and the last ``)`` of the DDL.

    Comma delimiters are normalized to ``", "``.

    Raises:
        MalformedDDL: If there is no enclosing pair of parentheses.
    """
    start = table_ddl.find("(")
    end = table_ddl.rfind(")")
    if start == -1 or end == -1 or end < start:
        raise MalformedDDL(f"Could not extract column block from DDL: {table_ddl!r}")

    block = _DELIMITER_RE.sub(", ", table_ddl[start + 1 : end].strip()).strip()
    logger.debug("Extracted column block: %r", block)
    return block


def split_columns(columns_block: str) -> list[str]:
    """Split a column block on commas at parenthesis depth 0."""
    columns: list[str] = []
    depth = 0
    current: list[str] = []

    for char in columns_block:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            columns.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    if current:
        columns.append("".join(current).strip())
    return columns


def parse_columns(table_ddl: str) -> ParsedSchema:
    """
    Parse a DDL text into catalog columns.

    Fragments that do not split into a name and a type are skipped, and
    unknown types are mapped to ``string``; both produce a warning rather than
    failing the parse. Duplicate column names are passed through as-is.
    """
    fragments = split_columns(extract_column_block(table_ddl))

    columns: list[ColumnDef] = []
    warnings: list[str] = []

    for index, fragment in enumerate(fragments):
        parts = fragment.strip().split(None, 1)
        if len(parts) < 2:
            warnings.append(
                f"Malformed column definition at index {index}: {fragment!r}. Skipped."
            )
            continue

        name, raw_type = parts[0], parts[1]
        mapping = map_type(raw_type)
        if not mapping.recognized:
            warnings.append(
                f"Unknown column type {mapping.source!r} for column {name!r}. "
                f"Defaulting to {mapping.glue_type!r}."
            )
        columns.append(ColumnDef(name=name, type=mapping.glue_type))

    for warning in warnings:
        logger.warning(warning)

    return ParsedSchema(columns=tuple(columns), warnings=tuple(warnings))
