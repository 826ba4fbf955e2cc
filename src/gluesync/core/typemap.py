"""Source-to-catalog column type mapping.

Snowflake type tokens are mapped onto the small Glue/Athena vocabulary used
for Iceberg tables. The mapping is a pure function: it never fails, and any
token it does not recognize degrades to ``string`` with ``recognized=False`` so
callers can surface a warning instead of blocking the whole schema sync.

Timezone and sub-second precision of timestamps are dropped on purpose: the
source and the catalog are assumed to share a timezone. Geometry,
semi-structured and variant types have no mapping and fall through to
``string``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

DEFAULT_TYPE = "string"

# `number` without precision maps to double, not int.
TYPE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "number": "double",
        "int": "int",
        "integer": "int",
        "string": "string",
        "varchar": "string",
        "text": "string",
        "float": "double",
        "double": "double",
        "boolean": "boolean",
        "date": "date",
    }
)

_DECIMAL_RE = re.compile(r"^(number|decimal|numeric)\((\d+),(\d+)\)$")


@dataclass(frozen=True)
class TypeMapping:
    """Outcome of mapping one source type token."""

    source: str
    glue_type: str
    recognized: bool = True


def normalize_type(raw: str) -> str:
    """Lower-case a type token and drop all whitespace (``NUMBER(10, 2)`` -> ``number(10,2)``)."""
    return re.sub(r"\s+", "", raw).lower()


def map_type(raw: str) -> TypeMapping:
    """
    Map a source type token to a catalog type token.

    Rules, first match wins:
      1) number/decimal/numeric with (precision,scale) -> decimal(p,s)
      2) anything starting with ``timestamp`` -> timestamp
      3) exact alias table lookup
      4) fallback -> string, flagged as unrecognized
    """
    token = normalize_type(raw)

    decimal = _DECIMAL_RE.match(token)
    if decimal:
        _, precision, scale = decimal.groups()
        if int(scale) <= int(precision):
            return TypeMapping(token, f"decimal({precision},{scale})")
        return TypeMapping(token, DEFAULT_TYPE, recognized=False)

    if token.startswith("timestamp"):
        return TypeMapping(token, "timestamp")

    if token in TYPE_ALIASES:
        return TypeMapping(token, TYPE_ALIASES[token])

    return TypeMapping(token, DEFAULT_TYPE, recognized=False)
