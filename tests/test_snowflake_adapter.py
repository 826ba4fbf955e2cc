import json

import pytest

from gluesync.core.adapters.snowflake import SnowflakeSourceAdapter, validate_identifier


class FakeCursor:
    def __init__(self, rows, error=None):
        self.rows = list(rows)
        self.error = error
        self.executed: list[tuple[str, tuple]] = []
        self.closed = False

    def execute(self, query, params=()):
        self.executed.append((query, params))
        if self.error is not None:
            raise self.error

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, *rows, error=None):
        self.cursors: list[FakeCursor] = []
        self.rows = rows
        self.error = error

    def cursor(self):
        cursor = FakeCursor(self.rows, self.error)
        self.cursors.append(cursor)
        return cursor


@pytest.mark.parametrize("name", ["ORDERS", "db.schema.orders", "RAW.ORDERS_$1"])
def test_validate_identifier_accepts_plain_and_dotted_names(name: str):
    assert validate_identifier(f" {name} ") == name


@pytest.mark.parametrize(
    "name", ["", "orders; drop table x", "a.b.c.d", "1orders", "orders tmp"]
)
def test_validate_identifier_rejects_anything_else(name: str):
    with pytest.raises(ValueError, match="Invalid Snowflake identifier"):
        validate_identifier(name)


def test_table_ddl_binds_table_name():
    conn = FakeConnection(("create or replace iceberg table ORDERS (ID NUMBER(38,0));",))

    ddl = SnowflakeSourceAdapter(conn).table_ddl("DB.PUBLIC.ORDERS")

    assert ddl.startswith("create or replace iceberg table ORDERS")
    cursor = conn.cursors[0]
    assert cursor.executed == [("SELECT GET_DDL('table', %s)", ("DB.PUBLIC.ORDERS",))]
    assert cursor.closed


def test_metadata_location_reads_iceberg_table_information():
    info = json.dumps(
        {"metadataLocation": "s3://b/t/metadata/v3.json", "status": "success"}
    )
    conn = FakeConnection((info,))

    pointer = SnowflakeSourceAdapter(conn).metadata_location("ORDERS")

    assert pointer == "s3://b/t/metadata/v3.json"


def test_metadata_location_missing_raises_lookup_error():
    conn = FakeConnection((json.dumps({"status": "success"}),))

    with pytest.raises(LookupError, match="metadataLocation"):
        SnowflakeSourceAdapter(conn).metadata_location("ORDERS")


def test_no_rows_raises_lookup_error():
    conn = FakeConnection()

    with pytest.raises(LookupError):
        SnowflakeSourceAdapter(conn).table_ddl("ORDERS")


def test_clear_consumes_stream_into_empty_temporary_table():
    conn = FakeConnection()

    SnowflakeSourceAdapter(conn).clear("RAW.ORDERS_STREAM")

    query, _ = conn.cursors[0].executed[0]
    assert query == (
        "CREATE OR REPLACE TEMPORARY TABLE RAW.ORDERS_STREAM_tmp "
        "AS SELECT 1 AS cnt FROM RAW.ORDERS_STREAM WHERE 1 = 2"
    )
    assert conn.cursors[0].closed


def test_clear_closes_cursor_and_propagates_errors():
    conn = FakeConnection(error=RuntimeError("warehouse suspended"))

    with pytest.raises(RuntimeError, match="warehouse suspended"):
        SnowflakeSourceAdapter(conn).clear("ORDERS_STREAM")

    assert conn.cursors[0].closed


def test_clear_rejects_unsafe_stream_names():
    conn = FakeConnection()

    with pytest.raises(ValueError):
        SnowflakeSourceAdapter(conn).clear("s; drop table t")

    assert conn.cursors == []
