"""Studio Backend - Error taxonomy.

Client-class failures (missing required fields) and server-class failures
(persistence faults) share one base so the HTTP layer can map them by code.
"""

from enum import StrEnum


class StoreErrorCode(StrEnum):
    """Error codes surfaced to API clients."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"


class StoreError(Exception):
    """Base exception for profile/post persistence errors."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class ValidationError(StoreError):
    """A required field is missing or empty."""

    def __init__(self, message: str):
        super().__init__(StoreErrorCode.VALIDATION_FAILED, message)


class StorageWriteError(StoreError):
    """Writing a row or a blob failed."""

    def __init__(self, reason: str):
        super().__init__(StoreErrorCode.STORAGE_WRITE_FAILED, f"Storage write failed: {reason}")


class StorageReadError(StoreError):
    """Reading rows failed."""

    def __init__(self, reason: str):
        super().__init__(StoreErrorCode.STORAGE_READ_FAILED, f"Storage read failed: {reason}")


def require_text(value: str | None, message: str) -> str:
    """Return value if it holds non-whitespace text, else raise ValidationError."""
    if value is None or not value.strip():
        raise ValidationError(message)
    return value
