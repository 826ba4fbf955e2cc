"""Catalog reconciliation for a single table.

`Reconciler` makes the catalog record of one table match the source table's
latest DDL and snapshot pointer:

  START -> DB_CHECKED -> TABLE_CHECKED -> CREATING | UPDATING -> DONE

with ERROR reachable from every step. The catalog write is committed before
the change-log is cleared: a failed clear only causes a harmless duplicate
reconciliation on the next trigger, while clearing first could drop a
pending change if the catalog write then failed.

Fail-closed: `reconcile` always returns a `ReconcileResult`, and a result is
only ever marked ok when every step succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from gluesync.core.catalog import CatalogClient, database_exists, table_exists
from gluesync.core.ddl import ParsedSchema, parse_columns
from gluesync.core.errors import (
    AlreadyExists,
    CatalogError,
    CatalogUnavailable,
    DatabaseCreateFailed,
    EntityNotFound,
    LogClearFailed,
    ReconciliationError,
    ResultCode,
    TableCreateFailed,
    TableUpdateFailed,
    UnhandledReconciliationError,
)
from gluesync.core.glue import TableIdentity, TableMetadataRecord
from gluesync.core.location import derive_storage_root
from gluesync.core.records import new_table_record, updated_table_record

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Steps of a single reconciliation."""

    START = "START"
    DB_CHECKED = "DB_CHECKED"
    TABLE_CHECKED = "TABLE_CHECKED"
    CREATING = "CREATING"
    UPDATING = "UPDATING"
    DONE = "DONE"
    ERROR = "ERROR"


class ChangeLogClearer(Protocol):
    """Interface for acknowledging a change-log once its change is applied."""

    def clear(self, handle: str) -> None:
        """Drain pending change-log entries without retaining any data."""
        ...


@dataclass(frozen=True)
class ReconcileResult:
    """
    Outcome of one reconciliation.

    Attributes:
        identity: Target table.
        code: Stable result code; its value prefixes `message`.
        message: Human-readable status line, ``"<code>: ..."``.
        stage: DONE on success, ERROR on failure.
        failed_at: Last stage reached before the failure, if any.
        warnings: Non-fatal parser/mapper warnings.
        record: Record written to the catalog, when a write was committed.
        error: Underlying error text, if any.
    """

    identity: TableIdentity
    code: ResultCode
    message: str
    stage: Stage
    failed_at: Stage | None = None
    warnings: tuple[str, ...] = ()
    record: TableMetadataRecord | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.code in (ResultCode.CREATED, ResultCode.UPDATED)

    @property
    def committed(self) -> bool:
        return self.code.committed

    def __str__(self) -> str:
        return self.message


class Reconciler:
    """Sequences existence checks, create/update and change-log acknowledgement."""

    def __init__(
        self,
        catalog: CatalogClient,
        change_log: ChangeLogClearer | None = None,
        *,
        optimistic: bool = False,
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            catalog: Catalog client adapter.
            change_log: Optional change-log acknowledger; required only when a
                change-log handle is passed to `reconcile`.
            optimistic: Pass the version read with the current record on
                update, so a concurrent writer makes the update fail instead
                of being overwritten.
        """
        self.catalog = catalog
        self.change_log = change_log
        self.optimistic = optimistic

    # ---------- public API ----------

    def reconcile(
        self,
        target_db: str,
        target_table: str,
        source_ddl: str,
        snapshot_pointer: str,
        change_log_handle: str | None = None,
    ) -> ReconcileResult:
        """Make the catalog record of ``target_db.target_table`` match the source."""
        identity = TableIdentity(database=target_db, table=target_table)
        stage = Stage.START
        schema: ParsedSchema | None = None
        logger.info("Reconciling table '%s'.", identity.full_name)

        try:
            schema = parse_columns(source_ddl)

            self._ensure_database(identity.database)
            stage = Stage.DB_CHECKED

            exists = table_exists(self.catalog, identity)
            stage = Stage.TABLE_CHECKED

            if exists:
                stage = Stage.UPDATING
                record = self._update(identity, schema, snapshot_pointer)
                code = ResultCode.UPDATED
                summary = (
                    f"Updated table '{identity.full_name}' to metadata location "
                    f"{snapshot_pointer} ({len(record.columns)} columns)."
                )
            else:
                stage = Stage.CREATING
                record = self._create(identity, schema, snapshot_pointer)
                code = ResultCode.CREATED
                summary = (
                    f"Created table '{identity.full_name}' at {record.location} "
                    f"({len(record.columns)} columns)."
                )
            stage = Stage.DONE
        except ReconciliationError as exc:
            return self._failure(identity, exc, stage, schema)
        except Exception as exc:  # noqa: BLE001 - fail closed on anything unexpected
            logger.exception("Unhandled error while reconciling '%s'.", identity.full_name)
            wrapped = UnhandledReconciliationError(f"{type(exc).__name__}: {exc}")
            wrapped.__cause__ = exc
            return self._failure(identity, wrapped, stage, schema)

        warnings = schema.warnings
        if change_log_handle:
            try:
                self._clear_change_log(change_log_handle)
            except LogClearFailed as exc:
                logger.warning("%s", exc)
                return ReconcileResult(
                    identity=identity,
                    code=ResultCode.LOG_NOT_CLEARED,
                    message=f"{ResultCode.LOG_NOT_CLEARED.value}: {summary} {exc}",
                    stage=Stage.DONE,
                    warnings=warnings,
                    record=record,
                    error=str(exc),
                )
            summary = f"{summary} Change log '{change_log_handle}' cleared."

        logger.info("%s", summary)
        return ReconcileResult(
            identity=identity,
            code=code,
            message=f"{code.value}: {summary}",
            stage=Stage.DONE,
            warnings=warnings,
            record=record,
        )

    # ---------- steps ----------

    def _ensure_database(self, name: str) -> None:
        """Create the database if it does not exist yet."""
        if database_exists(self.catalog, name):
            return
        try:
            self.catalog.create_database(name)
        except AlreadyExists:
            logger.info("Database '%s' was created concurrently; continuing.", name)
            return
        except CatalogError as exc:
            raise DatabaseCreateFailed(
                f"Failed to create database '{name}': {exc}"
            ) from exc
        logger.info("Database '%s' created.", name)

    def _create(
        self,
        identity: TableIdentity,
        schema: ParsedSchema,
        snapshot_pointer: str,
    ) -> TableMetadataRecord:
        """Create the table pointing at the snapshot's storage root."""
        record = new_table_record(
            identity,
            location=derive_storage_root(snapshot_pointer),
            columns=schema.columns,
            metadata_location=snapshot_pointer,
        )
        try:
            self.catalog.create_table(identity, record)
        except CatalogError as exc:
            raise TableCreateFailed(
                f"Failed to create table '{identity.full_name}': {exc}"
            ) from exc
        return record

    def _update(
        self,
        identity: TableIdentity,
        schema: ParsedSchema,
        snapshot_pointer: str,
    ) -> TableMetadataRecord:
        """Replace columns and roll the snapshot pointer pair forward."""
        try:
            current = self.catalog.get_table(identity)
        except EntityNotFound as exc:
            raise TableUpdateFailed(
                f"Table '{identity.full_name}' disappeared before it could be updated: {exc}"
            ) from exc
        except CatalogError as exc:
            raise CatalogUnavailable(
                f"Could not read table '{identity.full_name}': {exc}"
            ) from exc

        record = updated_table_record(
            current,
            columns=schema.columns,
            metadata_location=snapshot_pointer,
        )
        expected_version = current.version_id if self.optimistic else None
        try:
            self.catalog.update_table(identity, record, expected_version=expected_version)
        except CatalogError as exc:
            raise TableUpdateFailed(
                f"Failed to update table '{identity.full_name}': {exc}"
            ) from exc
        return record

    def _clear_change_log(self, handle: str) -> None:
        """Acknowledge the change-log; never undoes the committed catalog write."""
        if self.change_log is None:
            raise LogClearFailed(
                f"Change log '{handle}' was not cleared: no change-log client configured."
            )
        try:
            self.change_log.clear(handle)
        except Exception as exc:  # noqa: BLE001 - any clear failure is non-fatal
            raise LogClearFailed(
                f"Change log '{handle}' was not cleared: {exc}"
            ) from exc
        logger.info("Change log '%s' cleared.", handle)

    def _failure(
        self,
        identity: TableIdentity,
        exc: ReconciliationError,
        stage: Stage,
        schema: ParsedSchema | None,
    ) -> ReconcileResult:
        """Turn a reconciliation error into a coded failure result."""
        error = str(exc)
        message = (
            f"{exc.code.value}: Failed to reconcile table '{identity.full_name}'. "
            f"{type(exc).__name__}: {error}"
        )
        if not isinstance(exc, UnhandledReconciliationError):
            logger.error("%s", message)
        return ReconcileResult(
            identity=identity,
            code=exc.code,
            message=message,
            stage=Stage.ERROR,
            failed_at=stage,
            warnings=schema.warnings if schema else (),
            error=error,
        )


def reconcile(
    catalog: CatalogClient,
    target_db: str,
    target_table: str,
    source_ddl: str,
    snapshot_pointer: str,
    change_log_handle: str | None = None,
    *,
    change_log: ChangeLogClearer | None = None,
) -> ReconcileResult:
    """Reconcile one table with a throwaway `Reconciler`."""
    return Reconciler(catalog, change_log).reconcile(
        target_db,
        target_table,
        source_ddl,
        snapshot_pointer,
        change_log_handle,
    )
