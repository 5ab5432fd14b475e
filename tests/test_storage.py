"""Storage backends: memory, JSON file and database table."""
import json
import sqlite3

import pytest

from core.alert_store import AlertLifecycleStore
from core.services import init_db
from core.settings_store import SettingsStore
from core.storage import DatabaseStorage, JsonFileStorage, MemoryStorage


@pytest.fixture
def sqlite_conn():
    conn = sqlite3.connect(":memory:")
    init_db(conn)
    yield conn
    conn.close()


@pytest.fixture(params=["memory", "file", "database"])
def backend(request, tmp_path, sqlite_conn):
    if request.param == "memory":
        return MemoryStorage()
    if request.param == "file":
        return JsonFileStorage(str(tmp_path / "nested" / "storage.json"))
    return DatabaseStorage(sqlite_conn)


class TestContract:

    def test_missing_key(self, backend):
        assert backend.load("settings") is None

    def test_save_replaces_whole_value(self, backend):
        backend.save("settings", '{"a": 1}')
        backend.save("settings", '{"b": 2}')
        assert backend.load("settings") == '{"b": 2}'

    def test_keys_are_independent(self, backend):
        backend.save("settings", "{}")
        backend.save("dismissed-alerts", "[]")
        backend.remove("settings")
        assert backend.load("settings") is None
        assert backend.load("dismissed-alerts") == "[]"

    def test_remove_missing_key_is_noop(self, backend):
        backend.remove("nothing-here")
        assert backend.load("nothing-here") is None


class TestJsonFile:

    def test_file_layout(self, tmp_path):
        path = tmp_path / "storage.json"
        JsonFileStorage(str(path)).save("dismissed-alerts", '["low-stock"]')
        assert json.loads(path.read_text()) == {"dismissed-alerts": '["low-stock"]'}

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            JsonFileStorage(str(path)).load("settings")

    def test_corrupt_file_does_not_break_stores(self, tmp_path, clock):
        path = tmp_path / "storage.json"
        path.write_text("{oops")
        storage = JsonFileStorage(str(path))
        settings_store = SettingsStore(storage)
        settings_store.load()
        alert_store = AlertLifecycleStore(storage, clock=clock)
        alert_store.load()
        assert settings_store.is_loaded is True
        assert alert_store.dismissed_alerts == frozenset()

    def test_truncated_file_is_replaced_on_save(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text('{"settings": "{\\"low_stock')
        storage = JsonFileStorage(str(path))
        store = SettingsStore(storage)
        store.load()
        store.update_setting("expiry_warning_days", 40)

        document = json.loads(path.read_text())
        assert json.loads(document["settings"])["expiry_warning_days"] == 40
        assert SettingsStore(storage).load().expiry_warning_days == 40
        assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]

    def test_failed_write_leaves_previous_document(self, tmp_path, monkeypatch):
        path = tmp_path / "storage.json"
        storage = JsonFileStorage(str(path))
        storage.save("dismissed-alerts", '["low-stock"]')

        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("core.storage.os.replace", fail)
        with pytest.raises(OSError):
            storage.save("dismissed-alerts", '["low-stock", "out-of-stock"]')
        assert storage.load("dismissed-alerts") == '["low-stock"]'
        assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]

class TestSurvivesReload:

    def test_state_restored_by_new_session(self, backend, clock):
        settings_store = SettingsStore(backend)
        settings_store.load()
        settings_store.update_setting("low_stock_threshold", "4")
        alert_store = AlertLifecycleStore(backend, clock=clock)
        alert_store.load()
        alert_store.dismiss_alert("low-stock", "warning", "Paracetamol")

        settings_again = SettingsStore(backend)
        settings_again.load()
        alerts_again = AlertLifecycleStore(backend, clock=clock)
        alerts_again.load()
        assert settings_again.settings.low_stock_threshold == 4
        assert alerts_again.is_alert_dismissed("low-stock") is True
        assert alerts_again.alert_history == ()

    def test_sessions_sharing_a_backend_merge(self, backend, clock):
        first_settings = SettingsStore(backend)
        first_settings.load()
        second_settings = SettingsStore(backend)
        second_settings.load()
        first_alerts = AlertLifecycleStore(backend, clock=clock)
        first_alerts.load()
        second_alerts = AlertLifecycleStore(backend, clock=clock)
        second_alerts.load()

        first_settings.update_setting("low_stock_threshold", 4)
        second_settings.update_setting("expiry_alerts", False)
        first_alerts.dismiss_alert("low-stock", "warning", "Paracetamol")
        second_alerts.dismiss_alert("expired-products", "error", "Amoxicillin")

        settings_again = SettingsStore(backend)
        settings_again.load()
        alerts_again = AlertLifecycleStore(backend, clock=clock)
        alerts_again.load()
        assert settings_again.settings.low_stock_threshold == 4
        assert settings_again.settings.expiry_alerts is False
        assert alerts_again.dismissed_alerts == frozenset({"low-stock", "expired-products"})
