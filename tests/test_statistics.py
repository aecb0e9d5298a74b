# ==============================================
# Tests for Usage Statistics
# ==============================================
#
# Covers the two documented launch scenarios:
#   A. fresh start, counting launches within and across days
#   B. reinstall, detected from the durable anchor after a wipe
# plus load failures and the two reset flavours.
# ==============================================

from datetime import datetime

import pytest

from tiered_storage.analysis.decision import AccessibilityLevel, Backend, DeviceState
from tiered_storage.persistence.statistics_engine import (
    DURABLE_STATISTICS_KEY,
    VOLATILE_STATISTICS_KEY,
    StatisticsEngine,
)
from tiered_storage.persistence.usage_statistics import UsageStatistics
from tiered_storage.storage.codec import encode_value


@pytest.fixture
def engine(volatile, durable, clock):
    return StatisticsEngine(volatile, durable, clock=clock)


def seed_durable(durable, stats):
    durable.write(DURABLE_STATISTICS_KEY, encode_value(stats), AccessibilityLevel.AFTER_FIRST_UNLOCK)


# ==============================================
# UsageStatistics record
# ==============================================

class TestUsageStatistics:
    def test_default_is_zero(self):
        stats = UsageStatistics()
        assert stats.is_zero()
        assert stats.last_day_opened is None

    def test_dict_round_trip(self):
        stats = UsageStatistics(3, 9, 2, datetime(2024, 3, 1, 8, 0), 1)
        data = stats.to_dict()
        assert data["last_day_opened"] == "2024-03-01T08:00:00"
        assert UsageStatistics.from_dict(data) == stats

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(TypeError):
            UsageStatistics.from_dict([1, 2])


# ==============================================
# Scenario A: fresh start
# ==============================================

class TestFreshStart:
    def test_initial_snapshot_is_zero(self, engine):
        assert engine.snapshot().is_zero()
        assert engine.first_launch
        assert not engine.reinstall_detected

    def test_first_launch_seeds_anchor(self, engine, durable):
        assert durable.read(DURABLE_STATISTICS_KEY, AccessibilityLevel.AFTER_FIRST_UNLOCK).found

    def test_update_twice_same_day(self, engine, clock):
        first = engine.update_statistics()
        assert (first.times_using_app, first.times_daily_using_app, first.days_using_app) == (1, 1, 1)

        clock.advance(hours=3)
        second = engine.update_statistics()
        assert (second.times_using_app, second.times_daily_using_app, second.days_using_app) == (2, 2, 1)
        assert second.last_day_opened == clock.now

    def test_next_day_opens_new_day(self, engine, clock):
        engine.update_statistics()
        engine.update_statistics()
        clock.advance(days=1)
        stats = engine.update_statistics()
        assert (stats.times_using_app, stats.times_daily_using_app, stats.days_using_app) == (3, 1, 2)

    def test_calendar_date_not_24_hours(self, volatile, durable, clock):
        """23:30 and 00:10 the next morning are different days."""
        clock.now = datetime(2024, 3, 1, 23, 30)
        engine = StatisticsEngine(volatile, durable, clock=clock)
        engine.update_statistics()
        clock.advance(minutes=40)
        assert engine.update_statistics().days_using_app == 2

    def test_update_persists_both_copies(self, engine):
        engine.update_statistics()
        assert engine.persisted(Backend.VOLATILE) == engine.snapshot()
        assert engine.persisted(Backend.DURABLE) == engine.snapshot()

    def test_snapshot_is_a_copy(self, engine):
        snapshot = engine.snapshot()
        snapshot.times_using_app = 99
        assert engine.snapshot().times_using_app == 0

    def test_restart_keeps_counts(self, engine, volatile, durable, clock):
        engine.update_statistics()
        restarted = StatisticsEngine(volatile, durable, clock=clock)
        assert restarted.snapshot().times_using_app == 1
        assert not restarted.first_launch
        assert not restarted.reinstall_detected


# ==============================================
# Scenario B: reinstall
# ==============================================

class TestReinstall:
    def test_wiped_volatile_with_anchor(self, volatile, durable, clock):
        seed_durable(durable, UsageStatistics(days_using_app=5, times_using_app=20, times_app_installed=0))

        engine = StatisticsEngine(volatile, durable, clock=clock)

        stats = engine.snapshot()
        assert engine.reinstall_detected
        assert stats.times_app_installed == 1
        assert stats.days_using_app == 5
        assert stats.times_using_app == 20
        assert engine.persisted(Backend.VOLATILE) == stats

    def test_detected_after_wipe(self, engine, volatile, durable, clock):
        engine.update_statistics()
        clock.advance(days=1)
        engine.update_statistics()

        volatile.wipe()
        reinstalled = StatisticsEngine(volatile, durable, clock=clock)

        assert reinstalled.reinstall_detected
        assert reinstalled.snapshot().times_app_installed == 1
        assert reinstalled.snapshot().days_using_app == 2

    def test_install_count_accumulates(self, engine, volatile, durable, clock):
        engine.update_statistics()
        for expected in (1, 2):
            volatile.wipe()
            engine = StatisticsEngine(volatile, durable, clock=clock)
            assert engine.snapshot().times_app_installed == expected
            engine.update_statistics()
            clock.advance(days=1)

    def test_install_count_survives_restart_without_update(self, engine, volatile, durable, clock):
        for _ in range(3):
            engine.update_statistics()
            clock.advance(days=1)

        volatile.wipe()
        StatisticsEngine(volatile, durable, clock=clock)
        restarted = StatisticsEngine(volatile, durable, clock=clock)

        assert not restarted.reinstall_detected
        assert restarted.snapshot().times_app_installed == 1
        assert engine.persisted(Backend.DURABLE).times_app_installed == 1

    def test_equal_days_adopts_install_count(self, volatile, durable, clock):
        stats = UsageStatistics(days_using_app=2, times_using_app=4, times_app_installed=3)
        volatile.write(VOLATILE_STATISTICS_KEY, encode_value(stats))
        seed_durable(durable, stats)
        engine = StatisticsEngine(volatile, durable, clock=clock)
        assert not engine.reinstall_detected
        assert engine.snapshot().times_app_installed == 3


# ==============================================
# Load failures
# ==============================================

class TestLoadFailures:
    def test_corrupt_volatile_copy(self, volatile, durable, clock):
        volatile.write(VOLATILE_STATISTICS_KEY, b"garbage")
        engine = StatisticsEngine(volatile, durable, clock=clock)
        assert engine.snapshot().is_zero()
        assert len(engine.load_warnings) == 1

    def test_durable_read_failure_keeps_anchor(self, volatile, durable, clock):
        anchor = UsageStatistics(days_using_app=7, times_using_app=30, times_app_installed=2)
        seed_durable(durable, anchor)
        durable.fail_reads = True

        engine = StatisticsEngine(volatile, durable, clock=clock)

        assert engine.load_warnings
        assert not engine.reinstall_detected
        assert not engine.first_launch
        durable.fail_reads = False
        assert engine.persisted(Backend.DURABLE) == anchor

    def test_locked_before_first_unlock(self, volatile, durable, clock):
        anchor = UsageStatistics(days_using_app=4, times_using_app=8)
        seed_durable(durable, anchor)
        durable.device_state = DeviceState.before_first_unlock()

        engine = StatisticsEngine(volatile, durable, clock=clock)

        assert engine.load_warnings
        durable.device_state = DeviceState()
        assert engine.persisted(Backend.DURABLE) == anchor

    def test_update_does_not_overwrite_unread_anchor(self, volatile, durable, clock):
        anchor = UsageStatistics(days_using_app=7, times_using_app=30, times_app_installed=2)
        seed_durable(durable, anchor)
        durable.fail_reads = True
        engine = StatisticsEngine(volatile, durable, clock=clock)

        engine.update_statistics()

        assert engine.persisted(Backend.VOLATILE).times_using_app == 1
        assert len(engine.load_warnings) == 1
        durable.fail_reads = False
        assert engine.persisted(Backend.DURABLE) == anchor

    def test_update_reconciles_once_anchor_is_readable(self, volatile, durable, clock):
        seed_durable(durable, UsageStatistics(days_using_app=7, times_using_app=30, times_app_installed=2))
        durable.fail_reads = True
        engine = StatisticsEngine(volatile, durable, clock=clock)
        durable.fail_reads = False

        stats = engine.update_statistics()

        assert engine.reinstall_detected
        assert stats.times_app_installed == 3
        assert (stats.days_using_app, stats.times_using_app) == (8, 31)
        assert engine.persisted(Backend.DURABLE) == stats


# ==============================================
# Resets
# ==============================================

class TestReset:
    def test_reset_statistics_zeroes_both_copies(self, engine, clock):
        engine.update_statistics()
        clock.advance(days=1)
        engine.update_statistics()

        engine.reset_statistics()

        assert engine.snapshot().is_zero()
        assert engine.persisted(Backend.VOLATILE).is_zero()
        assert engine.persisted(Backend.DURABLE).is_zero()

    def test_reset_counters_keeps_install_count(self, volatile, durable, clock):
        seed_durable(durable, UsageStatistics(days_using_app=5, times_using_app=20))
        engine = StatisticsEngine(volatile, durable, clock=clock)

        stats = engine.reset_counters()

        assert stats.times_app_installed == 1
        assert stats.days_using_app == 0
        assert engine.persisted(Backend.DURABLE).times_app_installed == 1

    def test_update_after_reset_starts_new_day(self, engine):
        engine.update_statistics()
        engine.reset_statistics()
        assert engine.update_statistics().days_using_app == 1
