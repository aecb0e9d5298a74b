# ==============================================
# MigrationManager
# ==============================================
#
# PURPOSE:
#   Move one entry's raw bytes from one tier to the other, e.g. when a
#   value that used to live in the volatile tier is reclassified as
#   sensitive.
#
# CLASS: MigrationManager
# -----------------------
#   Stateless coordinator; holds the two backend handles only.
#
#   Methods:
#   --------
#   - migrate(key, direction, accessibility=WHEN_UNLOCKED) -> MigrationResult
#       1. Read raw bytes from the source tier.
#            missing → MigrationNotFoundError, nothing written
#            failed  → failure, nothing written
#       2. Write bytes to the destination tier.
#            failed  → failure, source left untouched
#       3. Delete from the source tier.
#            failed  → SUCCESS with duplicated=True (entry now in both
#                      tiers; caller may clean up with remove())
#
#   - volatile_to_durable(key, accessibility=WHEN_UNLOCKED) -> MigrationResult
#   - durable_to_volatile(key, accessibility=WHEN_UNLOCKED) -> MigrationResult
#
#   No step is retried. Two concurrent migrations of the same key must
#   be serialized by the caller.
#
# DATA CLASS: MigrationResult
# ---------------------------
#   - key: str
#   - direction: MigrationDirection
#   - success: bool
#   - duplicated: bool
#   - bytes_moved: int
#   - error: StorageError | None
#
# ==============================================

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..analysis.decision import DEFAULT_ACCESSIBILITY, AccessibilityLevel
from ..analysis.validator import validate_key
from ..errors import InvalidKeyError, MigrationNotFoundError, StorageError
from .base import StorageBackend

logger = logging.getLogger(__name__)


class MigrationDirection(Enum):
    VOLATILE_TO_DURABLE = "volatile_to_durable"
    DURABLE_TO_VOLATILE = "durable_to_volatile"


@dataclass
class MigrationResult:
    key: str
    direction: MigrationDirection
    success: bool = False
    duplicated: bool = False
    bytes_moved: int = 0
    error: Optional[StorageError] = None

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "direction": self.direction.value,
            "success": self.success,
            "duplicated": self.duplicated,
            "bytes_moved": self.bytes_moved,
            "error": str(self.error) if self.error else None,
        }


class MigrationManager:
    """Moves single entries between the volatile and durable tiers."""

    def __init__(self, volatile_backend: StorageBackend, durable_backend: StorageBackend):
        self.volatile_backend = volatile_backend
        self.durable_backend = durable_backend

    def migrate(
        self,
        key: str,
        direction: MigrationDirection,
        accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY,
    ) -> MigrationResult:
        """
        Execute a single-entry migration.

        Args:
            key: Storage key to move
            direction: Which way to move it
            accessibility: Level used on the durable side (read level for
                DURABLE_TO_VOLATILE, write level for VOLATILE_TO_DURABLE)

        Returns:
            MigrationResult; truthy when the value is present in the
            destination tier
        """
        result = MigrationResult(key=key, direction=direction)
        if not validate_key(key):
            result.error = InvalidKeyError(key)
            return result

        if direction is MigrationDirection.VOLATILE_TO_DURABLE:
            source, destination = self.volatile_backend, self.durable_backend
            source_level, destination_level = None, accessibility
        else:
            source, destination = self.durable_backend, self.volatile_backend
            source_level, destination_level = accessibility, None

        # Step 1: read raw bytes from the source
        read = source.read(key, source_level)
        if read.failed:
            result.error = read.error
            return result
        if not read.found:
            result.error = MigrationNotFoundError(key)
            return result

        # Step 2: write to destination; on failure the source is untouched
        written = destination.write(key, read.data, destination_level)
        if not written:
            logger.warning("Migration of '%s' (%s) failed writing destination: %s",
                           key, direction.value, written.error)
            result.error = written.error
            return result

        result.success = True
        result.bytes_moved = len(read.data)

        # Step 3: remove from source
        removed = source.delete(key, source_level)
        if not removed:
            result.duplicated = True
            result.error = removed.error
            logger.warning("Migrated '%s' (%s) but could not remove source entry; "
                           "value now present in both tiers: %s",
                           key, direction.value, removed.error)
        else:
            logger.info("Migrated '%s' (%s, %d bytes)", key, direction.value, result.bytes_moved)
        return result

    def volatile_to_durable(self, key: str, accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY) -> MigrationResult:
        return self.migrate(key, MigrationDirection.VOLATILE_TO_DURABLE, accessibility)

    def durable_to_volatile(self, key: str, accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY) -> MigrationResult:
        return self.migrate(key, MigrationDirection.DURABLE_TO_VOLATILE, accessibility)
