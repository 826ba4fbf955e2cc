"""Result codes and the exception taxonomy for catalog reconciliation.

Two families live here:

- catalog-level errors raised by catalog adapters (``CatalogError`` and its
  not-found / already-exists specializations), free of any SDK types;
- reconciliation errors raised by the core while sequencing a sync. Each one
  carries the stable ``ResultCode`` that ends up as the prefix of the message
  returned to callers.
"""

from __future__ import annotations

from enum import Enum


class ResultCode(str, Enum):
    """
    Stable numeric prefixes for reconciliation result messages.

    Codes starting with ``1`` mean the catalog write was committed. Codes
    starting with ``2`` mean nothing was written for the table.
    """

    CREATED = "100"
    UPDATED = "101"
    LOG_NOT_CLEARED = "102"
    CATALOG_UNAVAILABLE = "200"
    MALFORMED_DDL = "201"
    INVALID_POINTER = "202"
    DATABASE_CREATE_FAILED = "203"
    TABLE_CREATE_FAILED = "204"
    TABLE_UPDATE_FAILED = "205"
    SOURCE_UNAVAILABLE = "206"
    UNHANDLED = "299"

    @property
    def committed(self) -> bool:
        """True when the catalog mutation for the table was committed."""
        return self.value.startswith("1")


class CatalogError(RuntimeError):
    """Raised by catalog adapters when a catalog request fails."""

    def __init__(self, operation: str, error_code: str, message: str) -> None:
        super().__init__(f"{operation} failed ({error_code}): {message}")
        self.operation = operation
        self.error_code = error_code
        self.message = message


class EntityNotFound(CatalogError):
    """The requested database or table does not exist."""


class AlreadyExists(CatalogError):
    """The database or table being created already exists."""


class ReconciliationError(RuntimeError):
    """Base class for failures surfaced by the reconciliation core."""

    code: ResultCode = ResultCode.UNHANDLED


class CatalogUnavailable(ReconciliationError):
    """A catalog lookup failed for a reason other than not-found."""

    code = ResultCode.CATALOG_UNAVAILABLE


class MalformedDDL(ReconciliationError, ValueError):
    """The DDL text has no usable parenthesized column list."""

    code = ResultCode.MALFORMED_DDL


class InvalidPointerFormat(ReconciliationError, ValueError):
    """The snapshot pointer has no path separator to derive a root from."""

    code = ResultCode.INVALID_POINTER


class DatabaseCreateFailed(ReconciliationError):
    code = ResultCode.DATABASE_CREATE_FAILED


class TableCreateFailed(ReconciliationError):
    code = ResultCode.TABLE_CREATE_FAILED


class TableUpdateFailed(ReconciliationError):
    code = ResultCode.TABLE_UPDATE_FAILED


class SourceUnavailable(ReconciliationError):
    """The source DDL or snapshot pointer could not be read."""

    code = ResultCode.SOURCE_UNAVAILABLE


class LogClearFailed(ReconciliationError):
    """The change-log could not be acknowledged after a committed write."""

    code = ResultCode.LOG_NOT_CLEARED


class UnhandledReconciliationError(ReconciliationError):
    """Anything the core did not anticipate, wrapped with its original message."""

    code = ResultCode.UNHANDLED
