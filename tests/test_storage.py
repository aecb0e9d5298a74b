# ==============================================
# Tests for TieredStorage
# ==============================================
#
# Comprehensive tests for the storage context: typed values,
# routing, removal, key declarations, migration and statistics.
# ==============================================

from dataclasses import dataclass
from datetime import datetime

import pytest

from tiered_storage.analysis.decision import AccessibilityLevel, Backend, DeviceState, StorageIntent
from tiered_storage.config import AppConfig
from tiered_storage.context import StorageKeySpec, TieredStorage
from tiered_storage.errors import (
    DecodingFailedError,
    InvalidKeyError,
    StatisticsDisabledError,
    UnsupportedTypeError,
)
from tiered_storage.storage.codec import encode_value
from tiered_storage.storage.memory_backend import InMemoryDurableBackend, InMemoryVolatileBackend
from tiered_storage.storage.migrator import MigrationDirection


@dataclass
class Profile:
    name: str = ""
    age: int = 0


@dataclass
class Visit:
    page: str = ""
    at: datetime = datetime(2000, 1, 1)


VOLATILE = StorageIntent.volatile()
DURABLE = StorageIntent.durable()


# ==============================================
# Round trips
# ==============================================

class TestRoundTrip:
    @pytest.mark.parametrize("intent", [VOLATILE, DURABLE, StorageIntent.durable(AccessibilityLevel.ALWAYS)])
    @pytest.mark.parametrize("value, default", [
        ("Ada", ""),
        (42, 0),
        (2.5, 0.0),
        (True, False),
        ([1, 2, 3], []),
        ({"a": {"b": 1}}, {}),
        (b"\x00raw", b""),
        (datetime(2024, 3, 1, 9, 15), datetime(1970, 1, 1)),
        (Profile("Ada", 36), Profile()),
    ])
    def test_set_then_get(self, storage, intent, value, default):
        assert storage.set(value, "item", intent)
        assert storage.get("item", default, intent) == value

    def test_missing_returns_default(self, storage):
        result = storage.get_result("absent", 7, VOLATILE)
        assert result.value == 7
        assert not result.found
        assert not result.failed

    def test_get_result_reports_backend(self, storage):
        storage.set("x", "item", DURABLE)
        result = storage.get_result("item", "", DURABLE)
        assert result.found
        assert result.backend is Backend.DURABLE

    def test_decode_failure_returns_default_with_error(self, storage):
        storage.set("text", "item", VOLATILE)
        result = storage.get_result("item", 0, VOLATILE)
        assert result.value == 0
        assert isinstance(result.error, DecodingFailedError)

    def test_dataclass_with_datetime_field(self, storage):
        visit = Visit("home", datetime(2024, 1, 1, 9, 30))
        assert storage.set(visit, "last.visit", VOLATILE)
        assert storage.get("last.visit", Visit(), VOLATILE) == visit

    def test_unsupported_value(self, storage, volatile):
        result = storage.set(object(), "item", VOLATILE)
        assert not result
        assert isinstance(result.error, UnsupportedTypeError)
        assert volatile.keys() == []


# ==============================================
# Automatic routing
# ==============================================

class TestAutomaticRouting:
    def test_sensitive_key_lands_in_durable(self, storage, volatile, durable):
        assert storage.set("abc123", "auth.token")
        assert durable.read("auth.token", AccessibilityLevel.WHEN_UNLOCKED).found
        assert volatile.read("auth.token").missing
        assert storage.get("auth.token", "") == "abc123"

    def test_plain_key_lands_in_volatile(self, storage, volatile, durable):
        assert storage.set("Ada", "user.name")
        assert volatile.read("user.name").found
        assert durable.keys() == []

    def test_declared_tag(self, storage, volatile, durable):
        storage.set("1234", "card.pin", sensitive=True)
        assert durable.keys() == ["card.pin"]
        storage.set("dark", "theme.key.color", sensitive=False)
        assert volatile.keys() == ["theme.key.color"]

    def test_configured_default_level(self, volatile, durable):
        config = AppConfig(default_accessibility=AccessibilityLevel.AFTER_FIRST_UNLOCK)
        storage = TieredStorage(volatile, durable, config=config)
        storage.set("abc", "auth.token")
        assert durable.read("auth.token", AccessibilityLevel.AFTER_FIRST_UNLOCK).found

    def test_durable_lock_state_surfaces_as_error(self, storage, durable):
        durable.device_state = DeviceState.locked()
        result = storage.set("abc", "auth.token")
        assert not result
        assert result.error.status_code == -25308


# ==============================================
# Key validation
# ==============================================

class TestKeyValidation:
    @pytest.mark.parametrize("key", ["", "two words", "x" * 256])
    def test_invalid_key_never_reaches_backend(self, storage, volatile, durable, key):
        volatile.fail_writes = volatile.fail_reads = volatile.fail_deletes = True
        for result in (
            storage.set("v", key, VOLATILE),
            storage.get_result(key, "d", VOLATILE),
            storage.remove(key, VOLATILE),
        ):
            assert isinstance(result.error, InvalidKeyError)
        assert storage.get(key, "d") == "d"
        assert volatile.keys() == [] and durable.keys() == []

    def test_validate_key(self, storage):
        assert storage.validate_key("ok.key")
        assert not TieredStorage.validate_key("not ok")


# ==============================================
# Removal
# ==============================================

class TestRemove:
    def test_explicit_intent(self, storage, volatile):
        storage.set(1, "n", VOLATILE)
        assert storage.remove("n", VOLATILE)
        assert volatile.keys() == []

    def test_automatic_sweeps_both_tiers(self, storage, volatile, durable):
        storage.set("a", "item", VOLATILE)
        storage.set("b", "item", DURABLE)
        assert storage.remove("item")
        assert volatile.keys() == []
        assert durable.keys() == []

    def test_automatic_sweep_ignores_durable_absence(self, storage):
        storage.set("a", "item", VOLATILE)
        assert storage.remove("item")

    def test_automatic_sweep_reports_real_failure(self, storage, durable):
        storage.set("b", "item", DURABLE)
        durable.fail_deletes = True
        assert not storage.remove("item")

    def test_declared_tag_targets_one_tier(self, storage, volatile, durable):
        storage.set("a", "item", VOLATILE)
        storage.set("b", "item", DURABLE)
        assert storage.remove("item", sensitive=True)
        assert durable.keys() == []
        assert volatile.keys() == ["item"]

    def test_explicit_durable_missing_is_not_found(self, storage):
        result = storage.remove("absent", DURABLE)
        assert not result
        assert result.error.status_code == -25300


# ==============================================
# Key declarations and fast paths
# ==============================================

class TestStorageKeySpec:
    def test_read_default_then_written_value(self, storage, durable):
        token = StorageKeySpec("session", "", sensitive=True)
        assert storage.read(token) == ""
        assert storage.write(token, "abc")
        assert storage.read(token) == "abc"
        assert durable.keys() == ["session"]

    def test_explicit_intent(self, storage, volatile):
        launches = StorageKeySpec("launch.count", 0, intent=VOLATILE)
        storage.write(launches, 3)
        assert storage.read(launches) == 3
        assert volatile.keys() == ["launch.count"]


class TestFastPaths:
    def test_primitives_on_volatile_tier(self, storage, volatile):
        assert storage.set_bool("flag", True)
        assert storage.set_int("count", 3)
        assert storage.set_float("ratio", 0.5)
        assert storage.set_string("name", "Ada")
        assert (storage.get_bool("flag"), storage.get_int("count")) == (True, 3)
        assert (storage.get_float("ratio"), storage.get_string("name")) == (0.5, "Ada")
        assert volatile.storage["count"] == 3

    def test_interoperates_with_typed_get(self, storage):
        storage.set_int("count", 3)
        assert storage.get("count", 0, VOLATILE) == 3
        storage.set(4, "count", VOLATILE)
        assert storage.get_int("count") == 4

    def test_invalid_key(self, storage):
        assert storage.set_int("bad key", 1) is False
        assert storage.get_int("bad key") is None

    def test_nan_is_refused(self, storage, volatile):
        assert storage.set_float("ratio", float("nan")) is False
        assert storage.get("ratio", 0.0, VOLATILE) == 0.0

    def test_stored_non_finite_float_returns_default(self, storage, volatile):
        volatile.storage["ratio"] = float("nan")
        result = storage.get_result("ratio", 0.0, VOLATILE)
        assert result.value == 0.0
        assert result.failed


# ==============================================
# Migration and statistics through the context
# ==============================================

class TestMigrate:
    def test_reclassify_to_durable(self, storage, volatile):
        storage.set(Profile("Ada", 36), "profile", VOLATILE)
        result = storage.migrate("profile", MigrationDirection.VOLATILE_TO_DURABLE)
        assert result
        assert volatile.keys() == []
        assert storage.get("profile", Profile(), DURABLE) == Profile("Ada", 36)

    def test_destination_failure(self, storage, volatile, durable):
        storage.set("v", "item", VOLATILE)
        durable.fail_writes = True
        assert not storage.migrate("item", MigrationDirection.VOLATILE_TO_DURABLE)
        assert storage.get("item", "", VOLATILE) == "v"

    def test_unencodable_value_reports_failure(self, storage, volatile):
        volatile.storage["ratio"] = float("inf")
        result = storage.migrate("ratio", MigrationDirection.VOLATILE_TO_DURABLE)
        assert not result
        assert result.error is not None


class TestStatisticsAccess:
    def test_lazy_and_cached(self, storage, durable):
        assert durable.keys() == []
        engine = storage.statistics
        assert storage.statistics is engine
        assert "tiered_storage.statistics.durable" in durable.keys()

    def test_uses_injected_clock(self, storage, clock):
        stats = storage.statistics.update_statistics()
        assert stats.last_day_opened == clock.now

    def test_disabled(self, volatile, durable):
        storage = TieredStorage(volatile, durable, config=AppConfig(enable_statistics=False))
        with pytest.raises(StatisticsDisabledError):
            storage.statistics


class TestFromConfig:
    def test_memory_backends(self):
        config = AppConfig(service_name="svc")
        storage = TieredStorage.from_config(config)
        assert isinstance(storage.volatile_backend, InMemoryVolatileBackend)
        assert isinstance(storage.durable_backend, InMemoryDurableBackend)
        assert storage.durable_backend.service_name == "svc"

    def test_context_manager_closes(self, volatile, durable):
        with TieredStorage(volatile, durable) as storage:
            storage.set_int("n", 1)
        assert volatile.get_int("n") == 1

    def test_stored_bytes_are_codec_json(self, storage, volatile):
        storage.set({"a": 1}, "doc", VOLATILE)
        assert volatile.read("doc").data == encode_value({"a": 1})
