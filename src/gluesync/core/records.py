"""Builders for the table records written to the catalog.

Builders never mutate the record they start from: every call returns a new
``TableMetadataRecord`` with freshly built mappings.
"""

from __future__ import annotations

from typing import Iterable

from gluesync.core.glue import (
    EXTERNAL_TABLE,
    ICEBERG,
    METADATA_LOCATION,
    PREVIOUS_METADATA_LOCATION,
    TABLE_TYPE_PARAM,
    ColumnDef,
    TableIdentity,
    TableMetadataRecord,
)

# Fields returned by GetTable that UpdateTable rejects in a TableInput.
READ_ONLY_TABLE_FIELDS: tuple[str, ...] = (
    "DatabaseName",
    "CreatedBy",
    "IsRegisteredWithLakeFormation",
    "CatalogId",
    "VersionId",
    "IsMultiDialectView",
    "CreateTime",
    "UpdateTime",
)


def new_table_record(
    identity: TableIdentity,
    *,
    location: str,
    columns: Iterable[ColumnDef],
    metadata_location: str,
) -> TableMetadataRecord:
    """Build the record for a table that does not exist in the catalog yet."""
    return TableMetadataRecord(
        name=identity.table,
        location=location,
        columns=tuple(columns),
        parameters={
            METADATA_LOCATION: metadata_location,
            TABLE_TYPE_PARAM: ICEBERG,
        },
        table_type=EXTERNAL_TABLE,
    )


def updated_table_record(
    current: TableMetadataRecord,
    *,
    columns: Iterable[ColumnDef],
    metadata_location: str,
) -> TableMetadataRecord:
    """
    Build the update record from the current catalog record.

    - ``previous_metadata_location`` takes the current pointer, unless the
      pointer is unchanged (re-publishing keeps the existing audit pair)
    - ``metadata_location`` takes the new pointer
    - the column list is replaced wholesale
    - read-only catalog fields are dropped
    """
    parameters = dict(current.parameters)
    current_location = current.metadata_location
    if current_location is not None and current_location != metadata_location:
        parameters[PREVIOUS_METADATA_LOCATION] = current_location
    parameters[METADATA_LOCATION] = metadata_location

    attributes = {
        key: value
        for key, value in current.attributes.items()
        if key not in READ_ONLY_TABLE_FIELDS
    }

    return TableMetadataRecord(
        name=current.name,
        location=current.location,
        columns=tuple(columns),
        parameters=parameters,
        table_type=current.table_type,
        version_id=current.version_id,
        storage_attributes=dict(current.storage_attributes),
        attributes=attributes,
    )
