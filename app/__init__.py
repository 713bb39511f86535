"""Studio Backend - Core application modules.

Provides:
- SQLite models and the profile/post RecordStore
- BlobStore for uploaded files
- Core utilities: atomic_io, paths
"""

__version__ = "0.1.0"
