from __future__ import annotations

import copy
from contextlib import contextmanager
from typing import Any, Iterator, TypedDict

from botocore.exceptions import BotoCoreError, ClientError

from gluesync.core.errors import AlreadyExists, CatalogError, EntityNotFound
from gluesync.core.glue import (
    ColumnDef,
    DatabaseRecord,
    TableIdentity,
    TableMetadataRecord,
)
from gluesync.core.records import READ_ONLY_TABLE_FIELDS

_NOT_FOUND = "EntityNotFoundException"
_ALREADY_EXISTS = "AlreadyExistsException"


class GlueColumn(TypedDict):
    Name: str
    Type: str


class StorageDescriptorInput(TypedDict, total=False):
    Columns: list[GlueColumn]
    Location: str


class TableInput(TypedDict, total=False):
    Name: str
    TableType: str
    StorageDescriptor: StorageDescriptorInput
    Parameters: dict[str, str]


@contextmanager
def _catalog_call(operation: str) -> Iterator[None]:
    """Translate boto3 errors into SDK-free catalog errors."""
    try:
        yield
    except ClientError as exc:
        error = exc.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message", str(exc))
        if code == _NOT_FOUND:
            raise EntityNotFound(operation, code, message) from exc
        if code == _ALREADY_EXISTS:
            raise AlreadyExists(operation, code, message) from exc
        raise CatalogError(operation, code, message) from exc
    except BotoCoreError as exc:
        raise CatalogError(operation, type(exc).__name__, str(exc)) from exc


def record_from_table(table: dict[str, Any]) -> TableMetadataRecord:
    """Split a GetTable ``Table`` payload into a `TableMetadataRecord`."""
    storage = dict(table.get("StorageDescriptor") or {})
    columns = tuple(
        ColumnDef(name=c["Name"], type=c.get("Type", ""))
        for c in storage.pop("Columns", None) or []
    )
    location = storage.pop("Location", None)

    attributes = {
        key: value
        for key, value in table.items()
        if key not in {"Name", "StorageDescriptor", "Parameters", "TableType", "VersionId"}
    }
    return TableMetadataRecord(
        name=table["Name"],
        location=location,
        columns=columns,
        parameters=dict(table.get("Parameters") or {}),
        table_type=table.get("TableType"),
        version_id=table.get("VersionId"),
        storage_attributes=storage,
        attributes=attributes,
    )


def table_input_from_record(record: TableMetadataRecord) -> TableInput:
    """Build the TableInput for CreateTable/UpdateTable from a record."""
    table_input: dict[str, Any] = {
        key: copy.deepcopy(value)
        for key, value in record.attributes.items()
        if key not in READ_ONLY_TABLE_FIELDS
    }
    storage: dict[str, Any] = copy.deepcopy(dict(record.storage_attributes))
    storage["Columns"] = [GlueColumn(Name=c.name, Type=c.type) for c in record.columns]
    if record.location is not None:
        storage["Location"] = record.location

    table_input["Name"] = record.name
    table_input["StorageDescriptor"] = storage
    table_input["Parameters"] = dict(record.parameters)
    if record.table_type:
        table_input["TableType"] = record.table_type
    return table_input  # type: ignore[return-value]


class GlueCatalogAdapter:
    """Adapter around the boto3 Glue Data Catalog APIs (databases/tables)."""

    def __init__(self, client: Any, catalog_id: str | None = None) -> None:
        self.client = client
        self.catalog_id = catalog_id

    def _scope(self) -> dict[str, str]:
        """Return the CatalogId argument when a non-default catalog is targeted."""
        return {"CatalogId": self.catalog_id} if self.catalog_id else {}

    def get_database(self, name: str) -> DatabaseRecord:
        """Return a database by name."""
        with _catalog_call("GetDatabase"):
            response = self.client.get_database(Name=name, **self._scope())
        return DatabaseRecord(name=response["Database"]["Name"])

    def create_database(self, name: str) -> None:
        """Create an empty database."""
        with _catalog_call("CreateDatabase"):
            self.client.create_database(DatabaseInput={"Name": name}, **self._scope())

    def list_databases(self) -> list[DatabaseRecord]:
        """List all databases in the catalog."""
        out: list[DatabaseRecord] = []
        with _catalog_call("GetDatabases"):
            paginator = self.client.get_paginator("get_databases")
            for page in paginator.paginate(**self._scope()):
                for db in page.get("DatabaseList", []):
                    name = db.get("Name")
                    if name:
                        out.append(DatabaseRecord(name=name))
        return out

    def get_table(self, identity: TableIdentity) -> TableMetadataRecord:
        """Return the full table record."""
        with _catalog_call("GetTable"):
            response = self.client.get_table(
                DatabaseName=identity.database,
                Name=identity.table,
                **self._scope(),
            )
        return record_from_table(response["Table"])

    def create_table(self, identity: TableIdentity, record: TableMetadataRecord) -> None:
        """Create a table."""
        with _catalog_call("CreateTable"):
            self.client.create_table(
                DatabaseName=identity.database,
                TableInput=table_input_from_record(record),
                **self._scope(),
            )

    def update_table(
        self,
        identity: TableIdentity,
        record: TableMetadataRecord,
        *,
        expected_version: str | None = None,
    ) -> None:
        """Replace a table definition, optionally guarded by a version id."""
        kwargs: dict[str, Any] = dict(self._scope())
        if expected_version:
            kwargs["VersionId"] = expected_version
        with _catalog_call("UpdateTable"):
            self.client.update_table(
                DatabaseName=identity.database,
                TableInput=table_input_from_record(record),
                **kwargs,
            )
