from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from gluesync.core.errors import AlreadyExists, CatalogError, EntityNotFound  # noqa: E402
from gluesync.core.glue import (  # noqa: E402
    DatabaseRecord,
    TableIdentity,
    TableMetadataRecord,
)


class InMemoryCatalog:
    """Catalog fake that behaves like Glue for the operations the core uses."""

    def __init__(self, databases=(), tables=None):
        self.databases: set[str] = set(databases)
        self.tables: dict[TableIdentity, TableMetadataRecord] = dict(tables or {})
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.expected_versions: list[str | None] = []

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def get_database(self, name: str) -> DatabaseRecord:
        self._enter("get_database")
        if name not in self.databases:
            raise EntityNotFound("GetDatabase", "EntityNotFoundException", name)
        return DatabaseRecord(name=name)

    def create_database(self, name: str) -> None:
        self._enter("create_database")
        if name in self.databases:
            raise AlreadyExists("CreateDatabase", "AlreadyExistsException", name)
        self.databases.add(name)

    def list_databases(self) -> list[DatabaseRecord]:
        self._enter("list_databases")
        return [DatabaseRecord(name=n) for n in sorted(self.databases)]

    def get_table(self, identity: TableIdentity) -> TableMetadataRecord:
        self._enter("get_table")
        if identity.database not in self.databases or identity not in self.tables:
            raise EntityNotFound("GetTable", "EntityNotFoundException", identity.full_name)
        return self.tables[identity]

    def create_table(self, identity: TableIdentity, record: TableMetadataRecord) -> None:
        self._enter("create_table")
        if identity in self.tables:
            raise AlreadyExists("CreateTable", "AlreadyExistsException", identity.full_name)
        self.tables[identity] = replace(record, version_id="0")

    def update_table(
        self,
        identity: TableIdentity,
        record: TableMetadataRecord,
        *,
        expected_version: str | None = None,
    ) -> None:
        self._enter("update_table")
        self.expected_versions.append(expected_version)
        current = self.tables[identity]
        if expected_version is not None and expected_version != current.version_id:
            raise CatalogError(
                "UpdateTable", "ConcurrentModificationException", "version mismatch"
            )
        next_version = str(int(current.version_id or "0") + 1)
        self.tables[identity] = replace(record, version_id=next_version)


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog()
