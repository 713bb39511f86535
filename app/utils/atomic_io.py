"""Studio Backend - Atomic upload writes.

An upload is copied into "<final><temp_suffix>" next to its destination,
fsynced, then renamed over the final name. Readers of the upload directory
only ever see complete blobs; anything left with the temp suffix is an
interrupted write and is removed by cleanup_orphan_temp_files on startup.

The destination directory must already exist (BlobStore.ensure_root).
"""

import contextlib
import os
import shutil
from pathlib import Path
from typing import BinaryIO


def _fsync_directory(dir_path: Path) -> None:
    """Best-effort fsync of a directory so the rename survives a crash."""
    with contextlib.suppress(OSError, AttributeError):
        # O_DIRECTORY is missing on some platforms
        fd = os.open(dir_path, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)


def atomic_stream_to_file(
    stream: BinaryIO,
    final_path: str | Path,
    temp_suffix: str = ".tmp",
    chunk_size: int = 65536,
) -> int:
    """Copy a binary stream to final_path, publishing it with one rename.

    The temp file is removed on any failure, including errors raised by
    the stream itself.

    Args:
        stream: Binary file-like object (an upload's spooled file).
        final_path: Destination path; its directory must exist.
        temp_suffix: Suffix of the in-flight file.
        chunk_size: Copy buffer size.

    Returns:
        Number of bytes written.

    Raises:
        OSError: If the temp file cannot be created, written or renamed.
    """
    final_path = Path(final_path)
    temp_path = final_path.with_name(final_path.name + temp_suffix)

    # "x": never truncate another writer's in-flight file
    out = open(temp_path, "xb")
    published = False
    try:
        with out:
            shutil.copyfileobj(stream, out, chunk_size)
            out.flush()
            os.fsync(out.fileno())
            size = out.tell()
        os.replace(temp_path, final_path)
        published = True
    finally:
        if not published:
            with contextlib.suppress(OSError):
                temp_path.unlink()

    _fsync_directory(final_path.parent)
    return size


def cleanup_orphan_temp_files(directory: str | Path, temp_suffix: str = ".tmp") -> int:
    """Remove interrupted writes (files ending in temp_suffix) from directory.

    Returns:
        Number of files removed; 0 if the directory does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    removed = 0
    for temp_file in directory.glob(f"*{temp_suffix}"):
        with contextlib.suppress(OSError):
            temp_file.unlink()
            removed += 1
    return removed
