"""Shared fixtures: in-memory storage, a fixed "today" and a controllable clock."""
from datetime import date, datetime, timedelta

import pytest

from core.alert_store import AlertLifecycleStore
from core.constants import APP_TZ
from core.settings_store import Settings, SettingsStore
from core.storage import MemoryStorage

TODAY = date(2026, 10, 19)


class FakeClock:
    """Returns a fixed instant; tests move it with ``advance``/``set``."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    def set(self, value: datetime) -> None:
        self.now = value


class BrokenStorage(MemoryStorage):
    """Storage whose every operation fails."""

    def load(self, key):
        raise OSError("storage unavailable")

    def save(self, key, value):
        raise OSError("storage unavailable")

    def remove(self, key):
        raise OSError("storage unavailable")


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings():
    return Settings(low_stock_threshold=10, expiry_warning_days=30)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def broken_storage():
    return BrokenStorage()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 9, 0, tzinfo=APP_TZ))


@pytest.fixture
def alert_store(storage, clock):
    store = AlertLifecycleStore(storage, clock=clock)
    store.load()
    return store


@pytest.fixture
def notices():
    return []


@pytest.fixture
def settings_store(storage, notices):
    store = SettingsStore(storage, notifier=notices.append)
    store.load()
    return store
