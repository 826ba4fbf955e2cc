from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*){0,2}$"
)


def validate_identifier(name: str) -> str:
    """Return a plain or dotted (up to three part) Snowflake identifier, or raise."""
    value = name.strip()
    if not _IDENTIFIER_RE.match(value):
        raise ValueError(f"Invalid Snowflake identifier: {name!r}")
    return value


class SnowflakeSourceAdapter:
    """
    Adapter around a Snowflake DB-API connection.

    Reads the source side of a sync (table DDL and current Iceberg metadata
    location) and acknowledges table streams once their change is applied.
    """

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def _fetch_one(self, query: str, params: tuple[Any, ...] = ()) -> Any:
        """Run a query and return the first column of its first row."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(query, params)
            row = cursor.fetchone()
        finally:
            cursor.close()
        if not row:
            raise LookupError(f"Query returned no rows: {query}")
        return row[0]

    def table_ddl(self, table_full_name: str) -> str:
        """Return ``GET_DDL('table', ...)`` for a source table."""
        name = validate_identifier(table_full_name)
        return str(self._fetch_one("SELECT GET_DDL('table', %s)", (name,)))

    def metadata_location(self, table_full_name: str) -> str:
        """Return the current Iceberg metadata file location of a source table."""
        name = validate_identifier(table_full_name)
        raw = self._fetch_one(
            "SELECT SYSTEM$GET_ICEBERG_TABLE_INFORMATION(%s)", (name,)
        )
        info = json.loads(raw) if isinstance(raw, str) else raw
        location = (info or {}).get("metadataLocation")
        if not location:
            raise LookupError(f"No metadataLocation reported for table {name!r}")
        return str(location)

    def clear(self, handle: str) -> None:
        """
        Consume a stream without keeping any of its rows.

        A session-scoped temporary table is created from the stream with an
        always-false predicate; the DML advances the stream offset.
        """
        stream = validate_identifier(handle)
        query = (
            f"CREATE OR REPLACE TEMPORARY TABLE {stream}_tmp "
            f"AS SELECT 1 AS cnt FROM {stream} WHERE 1 = 2"
        )
        cursor = self.connection.cursor()
        try:
            cursor.execute(query)
        finally:
            cursor.close()
        logger.info("Stream '%s' consumed.", stream)
