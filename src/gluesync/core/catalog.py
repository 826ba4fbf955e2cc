"""Catalog client interface, existence checks and table status checks.

Existence checks are the only place where a catalog error is recovered
locally: a not-found response means ``False``. Every other failure is raised
as ``CatalogUnavailable`` so callers never mistake an unreachable catalog for
a missing table and try to create over an existing one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from gluesync.core.errors import CatalogError, CatalogUnavailable, EntityNotFound
from gluesync.core.glue import DatabaseRecord, TableIdentity, TableMetadataRecord

logger = logging.getLogger(__name__)


class CatalogClient(Protocol):
    """Interface for the catalog operations used by the core domain."""

    def get_database(self, name: str) -> DatabaseRecord:
        """Return the database, raising ``EntityNotFound`` when absent."""
        ...

    def create_database(self, name: str) -> None:
        """Create a database, raising ``AlreadyExists`` when it is already there."""
        ...

    def list_databases(self) -> list[DatabaseRecord]:
        """Return every database visible to the current principal."""
        ...

    def get_table(self, identity: TableIdentity) -> TableMetadataRecord:
        """Return the table record, raising ``EntityNotFound`` when absent."""
        ...

    def create_table(self, identity: TableIdentity, record: TableMetadataRecord) -> None:
        """Create a table from a record."""
        ...

    def update_table(
        self,
        identity: TableIdentity,
        record: TableMetadataRecord,
        *,
        expected_version: str | None = None,
    ) -> None:
        """Replace a table definition with the record."""
        ...


def database_exists(catalog: CatalogClient, name: str) -> bool:
    """Return True if the database exists, False if the catalog reports it missing."""
    try:
        catalog.get_database(name)
    except EntityNotFound:
        logger.info("Database '%s' does not exist.", name)
        return False
    except CatalogError as exc:
        raise CatalogUnavailable(
            f"Could not check whether database '{name}' exists: {exc}"
        ) from exc
    logger.debug("Database '%s' exists.", name)
    return True


def table_exists(catalog: CatalogClient, identity: TableIdentity) -> bool:
    """Return True if the table exists, False if the catalog reports it missing."""
    try:
        catalog.get_table(identity)
    except EntityNotFound:
        logger.info("Table '%s' does not exist.", identity.full_name)
        return False
    except CatalogError as exc:
        raise CatalogUnavailable(
            f"Could not check whether table '{identity.full_name}' exists: {exc}"
        ) from exc
    logger.debug("Table '%s' exists.", identity.full_name)
    return True


def find_table_databases(
    catalog: CatalogClient,
    table: str,
    *,
    exclude: str | None = None,
) -> list[str]:
    """Return the names of all databases holding a table called ``table``."""
    try:
        databases = catalog.list_databases()
    except CatalogError as exc:
        raise CatalogUnavailable(f"Could not list databases: {exc}") from exc

    found: list[str] = []
    for db in databases:
        if db.name == exclude:
            continue
        if table_exists(catalog, TableIdentity(database=db.name, table=table)):
            found.append(db.name)
    return found


@dataclass(frozen=True)
class TableStatus:
    """Where a table was found in the catalog, with a coded summary message."""

    identity: TableIdentity
    code: str
    message: str
    db_exists: bool = False
    table_in_target_db: bool = False
    other_databases: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.code == "001"


def check_table_status(catalog: CatalogClient, identity: TableIdentity) -> TableStatus:
    """
    Report whether a table exists in its target database or elsewhere.

    Codes:
      001 table exists in the target database
      002 target database exists, table only found in other databases
      003 target database exists, table not found anywhere
      004 target database missing, table found in other databases
      005 target database missing, table not found anywhere
      006 the check itself failed
    """
    db, table = identity.database, identity.table
    try:
        db_exists = database_exists(catalog, db)
        in_target = db_exists and table_exists(catalog, identity)
        others = [] if in_target else find_table_databases(catalog, table, exclude=db)
    except CatalogUnavailable as exc:
        return TableStatus(
            identity=identity,
            code="006",
            message=f"006: ERROR: Failed to check table '{table}'. Error: {exc}",
        )

    if in_target:
        code, message = "001", f"Table '{table}' exists in database '{db}'."
    elif db_exists and others:
        code, message = (
            "002",
            f"Table '{table}' not found in '{db}', but exists in other databases: {others}.",
        )
    elif db_exists:
        code, message = (
            "003",
            f"Table '{table}' not found in '{db}' or any other database.",
        )
    elif others:
        code, message = (
            "004",
            f"Database '{db}' does not exist, but table '{table}' exists in other databases: {others}.",
        )
    else:
        code, message = (
            "005",
            f"Database '{db}' does not exist, and table '{table}' is not found in any database.",
        )

    return TableStatus(
        identity=identity,
        code=code,
        message=f"{code}: {message}",
        db_exists=db_exists,
        table_in_target_db=in_target,
        other_databases=others,
    )
