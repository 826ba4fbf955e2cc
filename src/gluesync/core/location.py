"""Storage-root derivation for snapshot pointers."""

from __future__ import annotations

from gluesync.core.errors import InvalidPointerFormat


def derive_storage_root(metadata_location: str) -> str:
    """
    Strip the file name from a snapshot pointer.

    ``s3://bucket/a/b/metadata/v3.json`` -> ``s3://bucket/a/b/metadata/``

    Raises:
        InvalidPointerFormat: If the pointer has no path separator, or only the
            separators of its URI scheme (``s3://v3.json``).
    """
    pointer = metadata_location.strip()
    head, sep, _ = pointer.rpartition("/")
    if not sep:
        raise InvalidPointerFormat(
            f"Snapshot pointer has no '/' separator: {metadata_location!r}"
        )
    if head.endswith(":/"):
        raise InvalidPointerFormat(
            f"Snapshot pointer has no path below its scheme: {metadata_location!r}"
        )
    return f"{head}/"
