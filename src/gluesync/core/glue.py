"""Core domain models for the Glue catalog.

These models represent catalog entities in a simple, immutable form.
They are intentionally free of boto3 types and UI/CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

METADATA_LOCATION = "metadata_location"
PREVIOUS_METADATA_LOCATION = "previous_metadata_location"
TABLE_TYPE_PARAM = "table_type"
ICEBERG = "ICEBERG"
EXTERNAL_TABLE = "EXTERNAL_TABLE"


@dataclass(frozen=True)
class TableIdentity:
    """Database/table pair that every catalog operation is keyed on."""

    database: str
    table: str

    @property
    def full_name(self) -> str:
        return f"{self.database}.{self.table}"


@dataclass(frozen=True)
class ColumnDef:
    """
    A single catalog column.

    Attributes:
        name: Column name as it appeared in the source DDL.
        type: Catalog type token, e.g. ``int`` or ``decimal(10,2)``.
    """

    name: str
    type: str


@dataclass(frozen=True)
class DatabaseRecord:
    """Lightweight representation of a catalog database."""

    name: str


@dataclass(frozen=True)
class TableMetadataRecord:
    """
    Catalog representation of a table.

    Attributes:
        name: Table name.
        location: Physical storage root of the table.
        columns: Ordered column list.
        parameters: Table parameters; carries the snapshot pointer pair.
        table_type: Catalog table type (``EXTERNAL_TABLE`` for Iceberg tables).
        version_id: Catalog version marker read with the record, if any.
        storage_attributes: Storage descriptor fields other than columns and
            location (SerDe info, formats, ...), preserved verbatim.
        attributes: Remaining table fields (owner, description, catalog
            bookkeeping, ...), preserved verbatim.
    """

    name: str
    location: str | None
    columns: tuple[ColumnDef, ...]
    parameters: Mapping[str, str] = field(default_factory=dict)
    table_type: str | None = None
    version_id: str | None = None
    storage_attributes: Mapping[str, Any] = field(default_factory=dict)
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def metadata_location(self) -> str | None:
        return self.parameters.get(METADATA_LOCATION)

    @property
    def previous_metadata_location(self) -> str | None:
        return self.parameters.get(PREVIOUS_METADATA_LOCATION)
