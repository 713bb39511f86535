"""Studio Backend - Blob storage for uploaded files.

BlobStore writes each upload under a fixed root directory with a generated,
collision-resistant name and returns its public reference path
({url_prefix}/{name}). It keeps no record of which posts reference which
blobs; deleting a post leaves its files in place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from app.config import UPLOADS_DIR, UPLOADS_URL_PREFIX
from app.errors import StorageWriteError
from app.utils.atomic_io import atomic_stream_to_file, cleanup_orphan_temp_files
from app.utils.paths import (
    BLOB_TEMP_SUFFIX,
    blob_name_from_reference,
    blob_reference,
    generate_blob_name,
)

if TYPE_CHECKING:
    from typing import BinaryIO

logger = logging.getLogger(__name__)


@dataclass
class Upload:
    """One file part of a multipart submission."""

    filename: str | None
    stream: BinaryIO


class BlobStore:
    """Durable store for uploaded binary payloads."""

    def __init__(self, root: str | Path = UPLOADS_DIR, url_prefix: str = UPLOADS_URL_PREFIX):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_root(self) -> Path:
        """Create the root directory if missing (idempotent).

        Raises:
            StorageWriteError: If the directory cannot be created.
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageWriteError(f"cannot create upload directory {self.root}: {e}") from e
        return self.root

    def store(self, field_name: str, filename: str | None, stream: BinaryIO) -> str:
        """Persist one upload and return its reference path.

        Args:
            field_name: Form field the file arrived under (for logging).
            filename: Original client filename.
            stream: File-like object with read().

        Returns:
            Reference path such as /uploads/1700000000000-9f2c...-episode.mp3

        Raises:
            StorageWriteError: If the directory cannot be created or the write fails.
        """
        self.ensure_root()
        blob_name = generate_blob_name(filename)
        dest_path = self.root / blob_name

        try:
            size = atomic_stream_to_file(stream, dest_path, temp_suffix=BLOB_TEMP_SUFFIX)
        except OSError as e:
            raise StorageWriteError(f"cannot write {field_name} upload {filename!r}: {e}") from e

        logger.debug("Stored %s upload %r as %s (%d bytes)", field_name, filename, blob_name, size)
        return blob_reference(self.url_prefix, blob_name)

    def store_many(self, field_name: str, uploads: Iterable[Upload]) -> list[str]:
        """Persist uploads in order and return their reference paths.

        All or nothing: if one write fails, blobs already written by this call
        are discarded before the error propagates.

        Raises:
            StorageWriteError: If any write fails.
        """
        references: list[str] = []
        try:
            for upload in uploads:
                references.append(self.store(field_name, upload.filename, upload.stream))
        except StorageWriteError:
            self.discard_all(references)
            raise
        return references

    def resolve(self, reference: str) -> Path:
        """Map a reference path to the file it names under the root.

        Raises:
            ValueError: If the reference does not belong to this store.
        """
        return self.root / blob_name_from_reference(self.url_prefix, reference)

    def locate(self, blob_name: str) -> Path | None:
        """Return the path of a finished blob by stored name, or None."""
        if blob_name.endswith(BLOB_TEMP_SUFFIX):
            return None
        try:
            path = self.resolve(blob_reference(self.url_prefix, blob_name))
        except ValueError:
            return None
        return path if path.is_file() else None

    def discard(self, reference: str) -> bool:
        """Best-effort removal of a stored blob.

        Returns:
            True if a file was removed.
        """
        try:
            self.resolve(reference).unlink()
        except FileNotFoundError:
            return False
        except (OSError, ValueError):
            logger.warning("Failed to discard blob %s (non-fatal)", reference, exc_info=True)
            return False
        return True

    def discard_all(self, references: Iterable[str]) -> int:
        """Discard several blobs; returns how many were removed."""
        return sum(1 for reference in references if self.discard(reference))

    def cleanup_temp_files(self) -> int:
        """Remove leftovers of interrupted writes. Returns the count removed."""
        return cleanup_orphan_temp_files(self.root, temp_suffix=BLOB_TEMP_SUFFIX)
