# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - volatile          → fresh InMemoryVolatileBackend
# - durable           → fresh InMemoryDurableBackend (device unlocked)
# - clock             → controllable clock for statistics tests
# - storage           → TieredStorage over the two in-memory backends
# - file_backend      → FileVolatileBackend under tmp_path
#
# NOTES:
# ------
# - MySQL / MongoDB tests mock the client libraries; no server needed
# - Use tmp_path for temporary files
# ==============================================

from datetime import datetime, timedelta

import pytest

from tiered_storage.config import AppConfig
from tiered_storage.context import TieredStorage
from tiered_storage.storage.file_backend import FileVolatileBackend
from tiered_storage.storage.memory_backend import InMemoryDurableBackend, InMemoryVolatileBackend


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def volatile():
    """Empty in-memory volatile tier."""
    return InMemoryVolatileBackend()


@pytest.fixture
def durable():
    """Empty in-memory durable tier on an unlocked device."""
    return InMemoryDurableBackend("test_service")


@pytest.fixture
def clock():
    """Clock fixed at 10:00 on 2024-03-01."""
    return FakeClock(datetime(2024, 3, 1, 10, 0, 0))


@pytest.fixture
def storage(volatile, durable, clock):
    """Storage context over the in-memory tiers."""
    return TieredStorage(volatile, durable, config=AppConfig(service_name="test_service"), clock=clock)


@pytest.fixture
def file_backend(tmp_path):
    """File-backed volatile tier in a temporary directory."""
    return FileVolatileBackend(str(tmp_path / "volatile" / "store.json"))
