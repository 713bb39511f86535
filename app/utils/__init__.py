"""Studio Backend - Utility modules."""

from app.utils.atomic_io import atomic_stream_to_file, cleanup_orphan_temp_files
from app.utils.paths import (
    blob_name_from_reference,
    blob_reference,
    generate_blob_name,
    safe_filename,
)

__all__ = [
    # atomic_io
    "atomic_stream_to_file",
    "cleanup_orphan_temp_files",
    # paths
    "safe_filename",
    "generate_blob_name",
    "blob_reference",
    "blob_name_from_reference",
]
