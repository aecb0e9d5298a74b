# ==============================================
# Storage Errors
# ==============================================
#
# PURPOSE:
#   Exception taxonomy shared by every layer. Backends never raise
#   these across their boundary; they are carried as values inside
#   OperationResult / ReadResult / MigrationResult so a caller can
#   tell "not present" apart from "read failed".
#
# CLASSES:
# --------
# - StorageError              (base)
# - InvalidKeyError(key)
# - EncodingFailedError
# - DecodingFailedError
# - DurableBackendError(status_code)
# - VolatileBackendError
# - UnsupportedTypeError(type_name)
# - MigrationNotFoundError(key)
# - StatisticsDisabledError
#
# ==============================================

from typing import Optional


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class InvalidKeyError(StorageError):
    """Key failed validation and was not sent to any backend."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Invalid storage key: {key}")


class EncodingFailedError(StorageError):
    """Value could not be serialized to bytes."""

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = "Failed to encode value for storage"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DecodingFailedError(StorageError):
    """Stored bytes could not be turned back into the requested type."""

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = "Failed to decode value from storage"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DurableBackendError(StorageError):
    """Durable backend rejected an operation with a status code."""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        message = f"Durable backend error with status: {status_code}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class VolatileBackendError(StorageError):
    """Volatile backend operation failed."""

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = "Volatile backend operation failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedTypeError(StorageError):
    """Value type cannot be stored."""

    def __init__(self, type_name: Optional[str] = None):
        self.type_name = type_name
        message = "Unsupported data type for storage"
        if type_name:
            message = f"{message}: {type_name}"
        super().__init__(message)


class MigrationNotFoundError(StorageError):
    """Migration source holds no entry for the key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No entry to migrate for key: {key}")


class StatisticsDisabledError(StorageError):
    """Usage statistics were disabled in configuration."""

    def __init__(self):
        super().__init__("Usage statistics are disabled for this storage")
