# ==============================================
# In-Memory Backends
# ==============================================
#
# PURPOSE:
#   Process-local implementations of both tiers. Used as the default
#   when no real backend is configured, and by the test-suite.
#
# CLASSES:
# --------
# - InMemoryVolatileBackend(VolatileBackend)
#     dict[key] -> bytes | native primitive
#
# - InMemoryDurableBackend(DurableBackend)
#     dict[(service_name, key)] -> (AccessibilityLevel, bytes)
#
#   Both carry failure-injection flags:
#     fail_writes / fail_reads / fail_deletes
#   and wipe() to simulate the tier being cleared.
#
# ==============================================

from typing import Any, Dict, Optional, Tuple

from ..analysis.decision import AccessibilityLevel
from ..errors import DurableBackendError
from .base import (
    STATUS_DUPLICATE_ITEM,
    STATUS_PARAM,
    DurableBackend,
    VolatileBackend,
)


class SimulatedBackendFailure(OSError):
    """Raised internally when a failure-injection flag is set."""


class InMemoryVolatileBackend(VolatileBackend):
    name = "memory-volatile"
    backend_errors = (SimulatedBackendFailure,)

    def __init__(self):
        self.storage: Dict[str, Any] = {}
        self.fail_writes = False
        self.fail_reads = False
        self.fail_deletes = False

    def _fetch(self, key):
        if self.fail_reads:
            raise SimulatedBackendFailure("read disabled")
        return self.storage.get(key)

    def _put(self, key, value):
        if self.fail_writes:
            raise SimulatedBackendFailure("write disabled")
        self.storage[key] = value

    def _discard(self, key):
        if self.fail_deletes:
            raise SimulatedBackendFailure("delete disabled")
        self.storage.pop(key, None)

    def keys(self):
        return list(self.storage)

    def wipe(self) -> None:
        """Drop everything, as an uninstall would."""
        self.storage.clear()


class InMemoryDurableBackend(DurableBackend):
    name = "memory-durable"

    def __init__(self, service_name: str = "tiered_storage", **kwargs):
        super().__init__(service_name, **kwargs)
        self.storage: Dict[Tuple[str, str], Tuple[AccessibilityLevel, bytes]] = {}
        self.fail_writes = False
        self.fail_reads = False
        self.fail_deletes = False

    def _select(self, key) -> Optional[Tuple[AccessibilityLevel, bytes]]:
        if self.fail_reads:
            raise DurableBackendError(STATUS_PARAM, "read disabled")
        return self.storage.get((self.service_name, key))

    def _insert(self, key, accessibility, data):
        if self.fail_writes:
            raise DurableBackendError(STATUS_PARAM, "write disabled")
        if (self.service_name, key) in self.storage:
            raise DurableBackendError(STATUS_DUPLICATE_ITEM)
        self.storage[(self.service_name, key)] = (accessibility, data)

    def _delete(self, key, accessibility):
        if self.fail_deletes:
            raise DurableBackendError(STATUS_PARAM, "delete disabled")
        entry = self.storage.get((self.service_name, key))
        if entry is None or entry[0] is not accessibility:
            return False
        del self.storage[(self.service_name, key)]
        return True

    def keys(self):
        return [key for service, key in self.storage if service == self.service_name]

    def wipe(self) -> None:
        self.storage.clear()
