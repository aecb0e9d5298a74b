# ==============================================
# StatisticsEngine
# ==============================================
#
# PURPOSE:
#   Count app usage across launches and detect reinstalls. The
#   volatile tier is wiped by an uninstall; the durable tier is not.
#   A durable copy that has seen MORE days than the volatile copy
#   therefore means the volatile copy was wiped, i.e. a reinstall.
#
# WHAT IS PERSISTED:
#   Two identical UsageStatistics documents (codec JSON):
#     volatile tier: "tiered_storage.statistics"
#     durable tier:  "tiered_storage.statistics.durable"  @ AFTER_FIRST_UNLOCK
#   The durable copy is the reinstall anchor.
#
# CLASS: StatisticsEngine
# -----------------------
#   Constructor:
#   ------------
#   - __init__(volatile_backend, durable_backend, clock=None, ...)
#       Runs the initialization protocol:
#         1. Load volatile copy (missing → zero defaults)
#         2. Load durable copy
#         3. Durable missing → first launch: persist to durable, done
#         4. durable.days > volatile.days → reinstall:
#              times_app_installed = durable.times_app_installed + 1
#              adopt durable days + times, persist to both tiers
#            else → adopt durable.times_app_installed
#       A copy that fails to read or decode is treated as missing for
#       the in-memory state, recorded in `load_warnings` and logged.
#       An unreadable durable anchor is never overwritten: durable writes
#       are held back and update_statistics() retries the comparison
#       until the anchor can be read. reset_statistics() replaces it.
#
#   Methods:
#   --------
#   - update_statistics() -> UsageStatistics
#   - reset_statistics() -> UsageStatistics    (also resets the anchor)
#   - reset_counters() -> UsageStatistics      (keeps times_app_installed)
#   - snapshot() -> UsageStatistics
#   - persisted(tier: Backend) -> UsageStatistics | None
#
#   Mutations hold an RLock; the engine is the single owner of both
#   persisted copies.
#
# ==============================================

import dataclasses
import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..analysis.decision import AccessibilityLevel, Backend
from ..errors import StorageError
from ..storage.base import StorageBackend
from ..storage.codec import decode_value, encode_value
from .usage_statistics import UsageStatistics

logger = logging.getLogger(__name__)

VOLATILE_STATISTICS_KEY = "tiered_storage.statistics"
DURABLE_STATISTICS_KEY = "tiered_storage.statistics.durable"
STATISTICS_ACCESSIBILITY = AccessibilityLevel.AFTER_FIRST_UNLOCK


class StatisticsEngine:
    """Usage counters with reinstall detection."""

    def __init__(
        self,
        volatile_backend: StorageBackend,
        durable_backend: StorageBackend,
        clock: Optional[Callable[[], datetime]] = None,
        volatile_key: str = VOLATILE_STATISTICS_KEY,
        durable_key: str = DURABLE_STATISTICS_KEY,
        accessibility: AccessibilityLevel = STATISTICS_ACCESSIBILITY,
    ):
        self.volatile_backend = volatile_backend
        self.durable_backend = durable_backend
        self.clock = clock or datetime.now
        self.volatile_key = volatile_key
        self.durable_key = durable_key
        self.accessibility = accessibility

        self._lock = threading.RLock()
        self._statistics = UsageStatistics()
        self.load_warnings: List[str] = []
        self.first_launch = False
        self.reinstall_detected = False
        self._anchor_loaded = False

        self._initialize()

    # --- initialization ---

    def _load(self, tier: Backend) -> Tuple[Optional[UsageStatistics], Optional[StorageError]]:
        backend, key, level = self._target(tier)
        result = backend.read(key, level)
        if result.failed:
            return None, result.error
        if not result.found:
            return None, None
        try:
            return decode_value(result.data, value_type=UsageStatistics), None
        except StorageError as e:
            return None, e

    def _warn(self, message: str) -> None:
        self.load_warnings.append(message)
        logger.warning(message)

    def _initialize(self) -> None:
        with self._lock:
            volatile_stats, volatile_error = self._load(Backend.VOLATILE)
            if volatile_error:
                self._warn(f"Volatile statistics unreadable, starting from defaults: {volatile_error}")
            self._statistics = volatile_stats or UsageStatistics()

            self._reconcile()

    def _reconcile(self, retry: bool = False) -> None:
        """Compare the in-memory state with the durable anchor (steps 2-4)."""
        durable_stats, durable_error = self._load(Backend.DURABLE)
        if durable_error:
            if retry:
                logger.debug("Durable statistics anchor still unreadable: %s", durable_error)
            else:
                self._warn(f"Durable statistics anchor unreadable, reinstall detection skipped: {durable_error}")
            return
        self._anchor_loaded = True

        if durable_stats is None:
            # First launch ever: seed the anchor
            self.first_launch = True
            self._save(Backend.DURABLE)
            return

        if durable_stats.days_using_app > self._statistics.days_using_app:
            self.reinstall_detected = True
            self._statistics.times_app_installed = durable_stats.times_app_installed + 1
            self._statistics.days_using_app = durable_stats.days_using_app
            self._statistics.times_using_app = durable_stats.times_using_app
            logger.info("Reinstall detected (install #%d, %d days of use carried over)",
                        self._statistics.times_app_installed, self._statistics.days_using_app)
            self._save(Backend.VOLATILE)
            # the durable day count is unchanged, only the install count moves
            self._save(Backend.DURABLE)
        else:
            self._statistics.times_app_installed = durable_stats.times_app_installed

    # --- persistence ---

    def _target(self, tier: Backend) -> Tuple[StorageBackend, str, Optional[AccessibilityLevel]]:
        if tier is Backend.DURABLE:
            return self.durable_backend, self.durable_key, self.accessibility
        return self.volatile_backend, self.volatile_key, None

    def _save(self, tier: Backend) -> bool:
        backend, key, level = self._target(tier)
        result = backend.write(key, encode_value(self._statistics), level)
        if not result:
            logger.warning("Could not persist statistics to %s tier: %s", tier.value, result.error)
        return result.success

    def _save_all(self) -> bool:
        volatile_ok = self._save(Backend.VOLATILE)
        if not self._anchor_loaded:
            # never replace an anchor that has not been read
            return False
        durable_ok = self._save(Backend.DURABLE)
        return volatile_ok and durable_ok

    # --- public API ---

    def update_statistics(self) -> UsageStatistics:
        """Record one app-open event and persist to both tiers."""
        with self._lock:
            if not self._anchor_loaded:
                self._reconcile(retry=True)
            now = self.clock()
            stats = self._statistics
            stats.times_using_app += 1
            if stats.last_day_opened is not None and stats.last_day_opened.date() == now.date():
                stats.times_daily_using_app += 1
            else:
                stats.times_daily_using_app = 1
                stats.days_using_app += 1
            stats.last_day_opened = now
            self._save_all()
            return self.snapshot()

    def reset_statistics(self) -> UsageStatistics:
        """
        Zero everything in memory and in both tiers.

        This also zeroes the durable anchor, so the install count starts
        over. Use reset_counters() to keep it.
        """
        with self._lock:
            self._statistics = UsageStatistics()
            self._anchor_loaded = True
            self._save_all()
            return self.snapshot()

    def reset_counters(self) -> UsageStatistics:
        """Zero usage counters in both tiers but keep times_app_installed."""
        with self._lock:
            self._statistics = UsageStatistics(times_app_installed=self._statistics.times_app_installed)
            self._save_all()
            return self.snapshot()

    def snapshot(self) -> UsageStatistics:
        with self._lock:
            return dataclasses.replace(self._statistics)

    def persisted(self, tier: Backend) -> Optional[UsageStatistics]:
        """Read back the copy stored in one tier (None if missing or unreadable)."""
        stats, _ = self._load(tier)
        return stats

    @property
    def statistics(self) -> UsageStatistics:
        return self.snapshot()
