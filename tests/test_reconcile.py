from dataclasses import replace

from conftest import InMemoryCatalog
from gluesync.core.errors import AlreadyExists, CatalogError, EntityNotFound, ResultCode
from gluesync.core.glue import ColumnDef, TableIdentity, TableMetadataRecord
from gluesync.core.reconcile import Reconciler, Stage, reconcile

ORDERS = TableIdentity("analytics", "orders")
V1 = "s3://b/t/metadata/v1.json"
V2 = "s3://b/t/metadata/v2.json"


class RecordingClearer:
    def __init__(self, error: Exception | None = None):
        self.cleared: list[str] = []
        self.error = error

    def clear(self, handle: str) -> None:
        if self.error is not None:
            raise self.error
        self.cleared.append(handle)


def _existing_orders() -> InMemoryCatalog:
    return InMemoryCatalog(
        databases=["analytics"],
        tables={
            ORDERS: TableMetadataRecord(
                name="orders",
                location="s3://b/t/metadata/",
                columns=(ColumnDef("id", "int"),),
                parameters={"metadata_location": V1, "table_type": "ICEBERG"},
                table_type="EXTERNAL_TABLE",
                version_id="3",
                attributes={"Owner": "etl"},
            )
        },
    )


def test_creates_database_and_table_when_missing(catalog: InMemoryCatalog):
    result = reconcile(
        catalog,
        "analytics",
        "orders",
        "create table orders (id number, name varchar)",
        V1,
    )

    assert result.code == ResultCode.CREATED
    assert result.ok and result.committed
    assert result.stage == Stage.DONE
    assert result.message.startswith("100: Created table 'analytics.orders'")
    assert "analytics" in catalog.databases

    stored = catalog.tables[ORDERS]
    assert stored.columns == (ColumnDef("id", "double"), ColumnDef("name", "string"))
    assert stored.location == "s3://b/t/metadata/"
    assert dict(stored.parameters) == {"metadata_location": V1, "table_type": "ICEBERG"}
    assert stored.table_type == "EXTERNAL_TABLE"


def test_updates_existing_table_and_rolls_pointer_pair():
    catalog = _existing_orders()

    result = reconcile(
        catalog,
        "analytics",
        "orders",
        "create table orders (id int, amount decimal(10,2))",
        V2,
    )

    assert result.code == ResultCode.UPDATED
    assert result.message.startswith("101: Updated table 'analytics.orders'")
    stored = catalog.tables[ORDERS]
    assert stored.metadata_location == V2
    assert stored.previous_metadata_location == V1
    assert stored.columns == (
        ColumnDef("id", "int"),
        ColumnDef("amount", "decimal(10,2)"),
    )
    assert stored.attributes == {"Owner": "etl"}
    assert "create_database" not in catalog.calls
    assert "create_table" not in catalog.calls


def test_unknown_type_is_written_as_string_with_warning(catalog: InMemoryCatalog):
    result = reconcile(
        catalog, "analytics", "orders", "(id int, geo geography)", V1
    )

    assert result.ok
    assert catalog.tables[ORDERS].columns[1] == ColumnDef("geo", "string")
    assert len(result.warnings) == 1
    assert "geography" in result.warnings[0]


def test_catalog_outage_writes_nothing(catalog: InMemoryCatalog):
    catalog.failures["get_database"] = CatalogError(
        "GetDatabase", "InternalServiceException", "unavailable"
    )

    result = reconcile(catalog, "analytics", "orders", "(id int)", V1)

    assert result.code == ResultCode.CATALOG_UNAVAILABLE
    assert result.message.startswith(
        "200: Failed to reconcile table 'analytics.orders'. CatalogUnavailable: "
    )
    assert result.stage == Stage.ERROR
    assert result.failed_at == Stage.START
    assert not result.ok and not result.committed
    assert "create_database" not in catalog.calls
    assert "create_table" not in catalog.calls
    assert "update_table" not in catalog.calls


def test_table_lookup_outage_writes_nothing():
    catalog = _existing_orders()
    catalog.failures["get_table"] = CatalogError(
        "GetTable", "AccessDeniedException", "denied"
    )

    result = reconcile(catalog, "analytics", "orders", "(id int)", V2)

    assert result.code == ResultCode.CATALOG_UNAVAILABLE
    assert result.failed_at == Stage.DB_CHECKED
    assert "update_table" not in catalog.calls
    assert catalog.tables[ORDERS].metadata_location == V1


def test_reconcile_is_idempotent_for_the_same_inputs(catalog: InMemoryCatalog):
    ddl = "(id int, amount number(12,4))"
    first = reconcile(catalog, "analytics", "orders", ddl, V1)
    after_first = catalog.tables[ORDERS]

    second = reconcile(catalog, "analytics", "orders", ddl, V1)
    after_second = catalog.tables[ORDERS]

    assert first.code == ResultCode.CREATED
    assert second.code == ResultCode.UPDATED
    assert after_second.columns == after_first.columns
    assert after_second.metadata_location == V1
    assert after_second.previous_metadata_location is None


def test_previous_pointer_always_differs_from_current():
    catalog = _existing_orders()
    ddl = "(id int)"

    for pointer in (V2, V2, "s3://b/t/metadata/v3.json"):
        reconcile(catalog, "analytics", "orders", ddl, pointer)
        stored = catalog.tables[ORDERS]
        assert stored.previous_metadata_location != stored.metadata_location

    assert catalog.tables[ORDERS].previous_metadata_location == V2


def test_malformed_ddl_fails_before_any_catalog_call(catalog: InMemoryCatalog):
    result = reconcile(catalog, "analytics", "orders", "create table orders", V1)

    assert result.code == ResultCode.MALFORMED_DDL
    assert result.failed_at == Stage.START
    assert catalog.calls == []


def test_pointer_without_path_fails_create_before_write():
    catalog = InMemoryCatalog(databases=["analytics"])

    result = reconcile(catalog, "analytics", "orders", "(id int)", "v1.json")

    assert result.code == ResultCode.INVALID_POINTER
    assert result.failed_at == Stage.CREATING
    assert "create_table" not in catalog.calls
    assert ORDERS not in catalog.tables


def test_update_accepts_bare_pointer_names():
    catalog = InMemoryCatalog(
        databases=["analytics"],
        tables={
            ORDERS: TableMetadataRecord(
                name="orders",
                location="s3://b/t/metadata/",
                columns=(ColumnDef("id", "double"),),
                parameters={"metadata_location": "v1"},
            )
        },
    )

    result = reconcile(
        catalog, "analytics", "orders", "(id number, amt decimal(10,2))", "v2"
    )

    assert result.code == ResultCode.UPDATED
    stored = catalog.tables[ORDERS]
    assert stored.columns == (
        ColumnDef("id", "double"),
        ColumnDef("amt", "decimal(10,2)"),
    )
    assert dict(stored.parameters) == {
        "metadata_location": "v2",
        "previous_metadata_location": "v1",
    }
    assert stored.location == "s3://b/t/metadata/"


def test_database_created_concurrently_is_tolerated(catalog: InMemoryCatalog):
    catalog.failures["create_database"] = AlreadyExists(
        "CreateDatabase", "AlreadyExistsException", "analytics"
    )

    result = reconcile(catalog, "analytics", "orders", "(id int)", V1)

    assert result.code == ResultCode.CREATED
    assert ORDERS in catalog.tables


def test_database_create_failure(catalog: InMemoryCatalog):
    catalog.failures["create_database"] = CatalogError(
        "CreateDatabase", "AccessDeniedException", "denied"
    )

    result = reconcile(catalog, "analytics", "orders", "(id int)", V1)

    assert result.code == ResultCode.DATABASE_CREATE_FAILED
    assert result.failed_at == Stage.START
    assert "create_table" not in catalog.calls


def test_table_create_failure():
    catalog = InMemoryCatalog(databases=["analytics"])
    catalog.failures["create_table"] = CatalogError(
        "CreateTable", "ResourceNumberLimitExceededException", "too many"
    )

    result = reconcile(catalog, "analytics", "orders", "(id int)", V1)

    assert result.code == ResultCode.TABLE_CREATE_FAILED
    assert result.failed_at == Stage.CREATING
    assert result.message.startswith("204: ")
    assert ORDERS not in catalog.tables


def test_table_dropped_between_lookup_and_read_is_an_update_failure():
    catalog = _existing_orders()
    original_get_table = catalog.get_table
    seen = []

    def get_table_then_vanish(identity):
        if seen:
            raise EntityNotFound("GetTable", "EntityNotFoundException", "gone")
        seen.append(identity)
        return original_get_table(identity)

    catalog.get_table = get_table_then_vanish

    result = reconcile(catalog, "analytics", "orders", "(id int)", V2)

    assert result.code == ResultCode.TABLE_UPDATE_FAILED
    assert result.failed_at == Stage.UPDATING


def test_change_log_is_cleared_after_commit():
    catalog = _existing_orders()
    clearer = RecordingClearer()

    result = Reconciler(catalog, clearer).reconcile(
        "analytics", "orders", "(id int)", V2, "ORDERS_STREAM"
    )

    assert result.code == ResultCode.UPDATED
    assert clearer.cleared == ["ORDERS_STREAM"]
    assert result.message.endswith("Change log 'ORDERS_STREAM' cleared.")


def test_change_log_not_cleared_on_catalog_failure(catalog: InMemoryCatalog):
    catalog.failures["create_table"] = CatalogError("CreateTable", "Boom", "x")
    clearer = RecordingClearer()

    Reconciler(catalog, clearer).reconcile(
        "analytics", "orders", "(id int)", V1, "ORDERS_STREAM"
    )

    assert clearer.cleared == []


def test_failed_clear_keeps_committed_write():
    catalog = _existing_orders()
    clearer = RecordingClearer(error=RuntimeError("warehouse suspended"))

    result = Reconciler(catalog, clearer).reconcile(
        "analytics", "orders", "(id int)", V2, "ORDERS_STREAM"
    )

    assert result.code == ResultCode.LOG_NOT_CLEARED
    assert result.committed and not result.ok
    assert result.message.startswith("102: Updated table 'analytics.orders'")
    assert "warehouse suspended" in result.message
    assert catalog.tables[ORDERS].metadata_location == V2


def test_change_log_handle_without_clearer_reports_not_cleared(
    catalog: InMemoryCatalog,
):
    result = Reconciler(catalog).reconcile(
        "analytics", "orders", "(id int)", V1, "ORDERS_STREAM"
    )

    assert result.code == ResultCode.LOG_NOT_CLEARED
    assert ORDERS in catalog.tables


def test_unexpected_exception_is_wrapped(catalog: InMemoryCatalog):
    catalog.failures["create_table"] = KeyError("StorageDescriptor")

    result = reconcile(catalog, "analytics", "orders", "(id int)", V1)

    assert result.code == ResultCode.UNHANDLED
    assert result.stage == Stage.ERROR
    assert "UnhandledReconciliationError: KeyError" in result.message


def test_optimistic_update_passes_version_read():
    catalog = _existing_orders()

    result = Reconciler(catalog, optimistic=True).reconcile(
        "analytics", "orders", "(id int)", V2
    )

    assert result.ok
    assert catalog.expected_versions == ["3"]


def test_optimistic_update_fails_on_concurrent_write():
    catalog = _existing_orders()
    original_get_table = catalog.get_table

    def get_table_then_concurrent_write(identity):
        record = original_get_table(identity)
        bumped = str(int(record.version_id) + 1)
        catalog.tables[identity] = replace(record, version_id=bumped)
        return record

    catalog.get_table = get_table_then_concurrent_write

    result = Reconciler(catalog, optimistic=True).reconcile(
        "analytics", "orders", "(id int)", V2
    )

    assert result.code == ResultCode.TABLE_UPDATE_FAILED
    assert "ConcurrentModificationException" in result.message


def test_default_update_is_last_writer_wins():
    catalog = _existing_orders()

    Reconciler(catalog).reconcile("analytics", "orders", "(id int)", V2)

    assert catalog.expected_versions == [None]
