# ==============================================
# Backend Capability Contract
# ==============================================
#
# PURPOSE:
#   The interface every storage tier implements, plus the result
#   objects that carry success / absence / failure across the backend
#   boundary.
#
# DATA CLASSES:
# -------------
# - OperationResult(success, error)     → truthy iff success
# - ReadResult(data, error)             → found / missing / failed
#
# CLASS: StorageBackend (ABC)
# ---------------------------
#   Result-valued primitives (abstract):
#   - write(key, data, accessibility=None) -> OperationResult
#   - read(key, accessibility=None) -> ReadResult
#   - delete(key, accessibility=None) -> OperationResult
#
#   Legacy boolean views:
#   - set(key, data) -> bool
#   - get(key) -> bytes | None
#   - remove(key) -> bool
#
#   Typed fast paths:
#   - set_bool / get_bool, set_int / get_int,
#     set_float / get_float, set_string / get_string
#
# CLASS: VolatileBackend(StorageBackend)
# --------------------------------------
#   No access gating. Subclasses implement _fetch/_put/_discard and
#   list the client-library exceptions in `backend_errors`; those are
#   converted into VolatileBackendError results here. Primitive fast
#   paths store native values rather than codec bytes.
#
# CLASS: DurableBackend(StorageBackend)
# -------------------------------------
#   Entries keyed by (service_name, key) and tagged with exactly one
#   AccessibilityLevel. Every operation is gated by the level against
#   the current DeviceState. Writes are delete-then-insert: if the
#   insert fails after the delete, the key is left absent and the
#   failure is returned.
#
# ==============================================

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..analysis.decision import DEFAULT_ACCESSIBILITY, AccessibilityLevel, Backend, DeviceState
from ..errors import DecodingFailedError, DurableBackendError, StorageError, VolatileBackendError
from .codec import decode_value, encode_value

logger = logging.getLogger(__name__)


# Durable status codes (secure-store compatible values)
STATUS_SUCCESS = 0
STATUS_PARAM = -50
STATUS_DUPLICATE_ITEM = -25299
STATUS_ITEM_NOT_FOUND = -25300
STATUS_INTERACTION_NOT_ALLOWED = -25308

DEFAULT_MAX_ITEM_BYTES = 16 * 1024


@dataclass
class OperationResult:
    success: bool
    error: Optional[StorageError] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls) -> "OperationResult":
        return cls(True)

    @classmethod
    def failed(cls, error: StorageError) -> "OperationResult":
        return cls(False, error)


@dataclass
class ReadResult:
    data: Optional[bytes] = None
    error: Optional[StorageError] = None

    @property
    def found(self) -> bool:
        return self.data is not None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def missing(self) -> bool:
        return self.data is None and self.error is None

    @classmethod
    def hit(cls, data: bytes) -> "ReadResult":
        return cls(data=data)

    @classmethod
    def miss(cls) -> "ReadResult":
        return cls()

    @classmethod
    def failure(cls, error: StorageError) -> "ReadResult":
        return cls(error=error)


def is_not_found(error: Optional[StorageError]) -> bool:
    """True for the durable 'no such item' status."""
    return isinstance(error, DurableBackendError) and error.status_code == STATUS_ITEM_NOT_FOUND


class StorageBackend(ABC):
    """Byte-oriented key-value store for one tier."""

    tier: Backend
    name: str = "backend"

    @abstractmethod
    def write(self, key: str, data: bytes, accessibility: Optional[AccessibilityLevel] = None) -> OperationResult:
        ...

    @abstractmethod
    def read(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> ReadResult:
        ...

    @abstractmethod
    def delete(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> OperationResult:
        ...

    # --- legacy boolean views ---

    def set(self, key: str, data: bytes, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self.write(key, data, accessibility).success

    def get(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> Optional[bytes]:
        return self.read(key, accessibility).data

    def remove(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self.delete(key, accessibility).success

    def contains(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self.read(key, accessibility).found

    # --- typed fast paths ---

    def _set_primitive(self, key: str, value: Any, accessibility: Optional[AccessibilityLevel]) -> bool:
        try:
            data = encode_value(value)
        except StorageError as e:
            logger.warning("%s write rejected for key '%s': %s", self.name, key, e)
            return False
        return self.write(key, data, accessibility).success

    def _get_primitive(self, key: str, value_type: type, accessibility: Optional[AccessibilityLevel]) -> Any:
        result = self.read(key, accessibility)
        if not result.found:
            return None
        try:
            return decode_value(result.data, value_type=value_type)
        except DecodingFailedError:
            return None

    def set_bool(self, key: str, value: bool, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self._set_primitive(key, bool(value), accessibility)

    def get_bool(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> Optional[bool]:
        return self._get_primitive(key, bool, accessibility)

    def set_int(self, key: str, value: int, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self._set_primitive(key, int(value), accessibility)

    def get_int(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> Optional[int]:
        return self._get_primitive(key, int, accessibility)

    def set_float(self, key: str, value: float, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self._set_primitive(key, float(value), accessibility)

    def get_float(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> Optional[float]:
        return self._get_primitive(key, float, accessibility)

    def set_string(self, key: str, value: str, accessibility: Optional[AccessibilityLevel] = None) -> bool:
        return self._set_primitive(key, str(value), accessibility)

    def get_string(self, key: str, accessibility: Optional[AccessibilityLevel] = None) -> Optional[str]:
        return self._get_primitive(key, str, accessibility)


class VolatileBackend(StorageBackend):
    """Base for tiers that are wiped with the application."""

    tier = Backend.VOLATILE
    backend_errors: Tuple[type, ...] = ()

    @abstractmethod
    def _fetch(self, key: str) -> Any:
        """Return stored bytes or native primitive, or None if absent."""

    @abstractmethod
    def _put(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def _discard(self, key: str) -> None:
        ...

    def _failure(self, operation: str, key: str, error: Exception) -> VolatileBackendError:
        logger.warning("%s %s failed for key '%s': %s", self.name, operation, key, error)
        return VolatileBackendError(f"{operation} '{key}': {error}")

    def write(self, key, data, accessibility=None):
        try:
            self._put(key, bytes(data))
        except self.backend_errors as e:
            return OperationResult.failed(self._failure("write", key, e))
        return OperationResult.ok()

    def read(self, key, accessibility=None):
        try:
            stored = self._fetch(key)
        except self.backend_errors as e:
            return ReadResult.failure(self._failure("read", key, e))
        if stored is None:
            return ReadResult.miss()
        if isinstance(stored, (bytes, bytearray)):
            return ReadResult.hit(bytes(stored))
        # native primitive written through a fast path
        try:
            return ReadResult.hit(encode_value(stored))
        except StorageError as e:
            return ReadResult.failure(self._failure("read", key, e))

    def delete(self, key, accessibility=None):
        try:
            self._discard(key)
        except self.backend_errors as e:
            return OperationResult.failed(self._failure("delete", key, e))
        return OperationResult.ok()

    def _set_primitive(self, key, value, accessibility):
        if isinstance(value, float) and not math.isfinite(value):
            logger.warning("%s write rejected for key '%s': non-finite float %r", self.name, key, value)
            return False
        try:
            self._put(key, value)
        except self.backend_errors as e:
            self._failure("write", key, e)
            return False
        return True

    def _get_primitive(self, key, value_type, accessibility):
        try:
            stored = self._fetch(key)
        except self.backend_errors as e:
            self._failure("read", key, e)
            return None
        if type(stored) is value_type:
            return stored
        if value_type is float and type(stored) is int:
            return float(stored)
        if isinstance(stored, (bytes, bytearray)):
            return super()._get_primitive(key, value_type, accessibility)
        return None


class DurableBackend(StorageBackend):
    """Base for tiers that survive removal and gate access by lock state."""

    tier = Backend.DURABLE
    backend_errors: Tuple[type, ...] = ()

    def __init__(
        self,
        service_name: str,
        max_item_bytes: int = DEFAULT_MAX_ITEM_BYTES,
        default_accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY,
        device_state: Optional[DeviceState] = None,
    ):
        self.service_name = service_name
        self.max_item_bytes = max_item_bytes
        self.default_accessibility = default_accessibility
        self.device_state = device_state or DeviceState()

    # --- storage hooks ---

    @abstractmethod
    def _select(self, key: str) -> Optional[Tuple[AccessibilityLevel, bytes]]:
        """Return (level, data) for (service_name, key), or None."""

    @abstractmethod
    def _insert(self, key: str, accessibility: AccessibilityLevel, data: bytes) -> None:
        """Insert a new entry. Raise DurableBackendError(DUPLICATE_ITEM) if one exists."""

    @abstractmethod
    def _delete(self, key: str, accessibility: AccessibilityLevel) -> bool:
        """Delete the entry if it carries `accessibility`. Return whether one was deleted."""

    def _status_of(self, error: Exception) -> int:
        """Map a client-library exception to a status code."""
        return STATUS_PARAM

    # --- gating / error translation ---

    def _level(self, accessibility: Optional[AccessibilityLevel]) -> AccessibilityLevel:
        return accessibility or self.default_accessibility

    def _gate(self, operation: str, key: str, level: AccessibilityLevel) -> Optional[DurableBackendError]:
        if level.permits(self.device_state):
            return None
        logger.warning("%s %s denied for key '%s': %s not accessible in current lock state",
                       self.name, operation, key, level.value)
        return DurableBackendError(STATUS_INTERACTION_NOT_ALLOWED, f"{level.value} while locked")

    def _translate(self, operation: str, key: str, error: Exception) -> DurableBackendError:
        if isinstance(error, DurableBackendError):
            translated = error
        else:
            translated = DurableBackendError(self._status_of(error), str(error))
        logger.warning("%s %s failed for key '%s': %s", self.name, operation, key, translated)
        return translated

    # --- capability contract ---

    def write(self, key, data, accessibility=None):
        level = self._level(accessibility)
        denied = self._gate("write", key, level)
        if denied:
            return OperationResult.failed(denied)
        data = bytes(data)
        try:
            # no native upsert: clear any prior entry under this level first
            self._delete(key, level)
        except (DurableBackendError,) + self.backend_errors as e:
            return OperationResult.failed(self._translate("write", key, e))
        try:
            if len(data) > self.max_item_bytes:
                raise DurableBackendError(
                    STATUS_PARAM, f"{len(data)} bytes exceeds limit of {self.max_item_bytes}"
                )
            self._insert(key, level, data)
        except (DurableBackendError,) + self.backend_errors as e:
            # key stays absent after a failed insert
            return OperationResult.failed(self._translate("write", key, e))
        return OperationResult.ok()

    def read(self, key, accessibility=None):
        level = self._level(accessibility)
        denied = self._gate("read", key, level)
        if denied:
            return ReadResult.failure(denied)
        try:
            row = self._select(key)
        except (DurableBackendError,) + self.backend_errors as e:
            return ReadResult.failure(self._translate("read", key, e))
        if row is None or row[0] is not level:
            return ReadResult.miss()
        return ReadResult.hit(row[1])

    def delete(self, key, accessibility=None):
        level = self._level(accessibility)
        denied = self._gate("delete", key, level)
        if denied:
            return OperationResult.failed(denied)
        try:
            removed = self._delete(key, level)
        except (DurableBackendError,) + self.backend_errors as e:
            return OperationResult.failed(self._translate("delete", key, e))
        if not removed:
            return OperationResult.failed(DurableBackendError(STATUS_ITEM_NOT_FOUND))
        return OperationResult.ok()
