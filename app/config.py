"""Studio Backend - Configuration constants.

Plain module-level configuration. No external config libraries.
All paths are relative to the repository root by default.
"""

import os
from pathlib import Path

# Repository root (parent of app/)
REPO_ROOT = Path(__file__).parent.parent.resolve()


def _get_data_dir() -> Path:
    """Get the data directory from environment or use default.

    Environment variable STUDIO_DATA_DIR relocates the database and uploads.

    Returns:
        Data directory path.
    """
    env_val = os.environ.get("STUDIO_DATA_DIR")
    if env_val:
        return Path(env_val).expanduser().resolve()
    return REPO_ROOT / "data"


def _get_port() -> int:
    """Get the listening port from environment or use default.

    Returns:
        Port number (default 5000).
    """
    env_val = os.environ.get("PORT")
    if env_val:
        try:
            port = int(env_val)
            if 0 < port < 65536:
                return port
        except ValueError:
            pass
    return 5000


# Data directories
DATA_DIR = _get_data_dir()
UPLOADS_DIR = DATA_DIR / "uploads"

# Database path
DB_PATH = DATA_DIR / "studio.db"

# Seconds a connection waits on SQLite's write lock before failing
SQLITE_BUSY_TIMEOUT_SEC = 30.0

# Public URL prefix under which uploaded blobs are served
UPLOADS_URL_PREFIX = "/uploads"

# Prefix for all JSON endpoints
API_PREFIX = "/api"

# HTTP listening port (override with PORT)
PORT = _get_port()
