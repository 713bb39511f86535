"""Studio Backend - Blob naming and reference path utilities.

Pure functions. Does NOT create directories or touch the filesystem.
"""

import re
import secrets
import time
from pathlib import PurePosixPath, PureWindowsPath

# Anything outside this set is replaced in stored filenames. Commas in
# particular must never reach a stored name: Post.sources is comma-joined.
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# Suffix of in-flight blob writes. "~" never survives safe_filename(),
# so no finished blob can end with it.
BLOB_TEMP_SUFFIX = ".~part"

MAX_FILENAME_CHARS = 120


def safe_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a safe basename.

    Args:
        filename: Original filename from the upload (may contain directories).

    Returns:
        Basename with unsafe characters replaced by "_", or "file" if empty.
    """
    if not filename:
        return "file"
    # Strip both POSIX and Windows style directory parts
    name = PureWindowsPath(PurePosixPath(filename).name).name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    if not name:
        return "file"
    return name[-MAX_FILENAME_CHARS:]


def generate_blob_name(filename: str | None) -> str:
    """Generate a collision-resistant stored name for an upload.

    Format: {epoch_millis}-{16 hex chars}-{safe original filename}. The random
    token keeps concurrent uploads of the same file in the same millisecond
    apart; the original name is kept for traceability.
    """
    millis = time.time_ns() // 1_000_000
    return f"{millis}-{secrets.token_hex(8)}-{safe_filename(filename)}"


def blob_reference(url_prefix: str, blob_name: str) -> str:
    """Get the public reference path of a stored blob.

    Returns:
        "{url_prefix}/{blob_name}", e.g. /uploads/1700000000000-ab12...-ep1.mp3
    """
    return f"{url_prefix.rstrip('/')}/{blob_name}"


def blob_name_from_reference(url_prefix: str, reference: str) -> str:
    """Extract the stored name from a reference path.

    Raises:
        ValueError: If the reference is not a direct child of url_prefix.
    """
    prefix = url_prefix.rstrip("/") + "/"
    if not reference.startswith(prefix):
        raise ValueError(f"Reference outside {url_prefix}: {reference}")
    name = reference[len(prefix) :]
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"Invalid blob reference: {reference}")
    return name
