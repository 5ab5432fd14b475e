"""Settings store: coercion, hydration, persistence and change notices."""
import json
from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from core.constants import SETTINGS_KEY
from core.settings_store import (
    Settings,
    SettingsStore,
    coerce_threshold,
    settings_from_mapping,
)
from core.storage import MemoryStorage


class TestCoercion:

    @pytest.mark.parametrize("raw, expected", [
        ("", 10),
        ("   ", 10),
        (None, 10),
        ("abc", 10),
        ("-3", 10),
        (-3, 10),
        ("15", 15),
        (15, 15),
        ("0", 0),
        (float("inf"), 10),
        (float("nan"), 10),
    ])
    def test_low_stock_threshold(self, raw, expected):
        assert coerce_threshold("low_stock_threshold", raw) == expected

    def test_expiry_default(self):
        assert coerce_threshold("expiry_warning_days", "") == 30

    def test_stored_record_merges_over_defaults(self):
        settings = settings_from_mapping({"expiry_warning_days": 45, "unknown": 1})
        assert settings.expiry_warning_days == 45
        assert settings.low_stock_threshold == 10
        assert settings.expiry_alerts is True


class TestLoad:

    def test_defaults_without_record(self, storage):
        store = SettingsStore(storage)
        assert store.is_loaded is False
        assert store.load() == Settings()
        assert store.is_loaded is True

    def test_stored_values_win(self):
        storage = MemoryStorage({SETTINGS_KEY: json.dumps({
            "low_stock_threshold": 3, "expiry_alerts": False, "theme": "dark",
        })})
        store = SettingsStore(storage)
        store.load()
        assert store.settings.low_stock_threshold == 3
        assert store.settings.expiry_alerts is False
        assert store.settings.theme == "dark"
        assert store.settings.expiry_warning_days == 30

    @pytest.mark.parametrize("payload", ["{not json", "[1, 2]", '"text"'])
    def test_malformed_record_falls_back_to_defaults(self, payload, caplog):
        store = SettingsStore(MemoryStorage({SETTINGS_KEY: payload}))
        assert store.load() == Settings()
        assert store.is_loaded is True
        assert "Failed to load settings" in caplog.text

    def test_storage_failure_falls_back_to_defaults(self, broken_storage):
        store = SettingsStore(broken_storage)
        assert store.load() == Settings()
        assert store.is_loaded is True

    def test_stored_negative_threshold_reset(self):
        storage = MemoryStorage({SETTINGS_KEY: json.dumps({"low_stock_threshold": -1})})
        store = SettingsStore(storage)
        store.load()
        assert store.settings.low_stock_threshold == 10


class TestUpdate:

    def test_empty_threshold_resets_to_default(self, settings_store):
        settings_store.update_setting("low_stock_threshold", "25")
        settings_store.update_setting("low_stock_threshold", "")
        assert settings_store.settings.low_stock_threshold == 10

    def test_other_keys_stored_as_given(self, settings_store):
        settings_store.update_setting("currency", "USD")
        settings_store.update_setting("auto_reorder", True)
        assert settings_store.settings.currency == "USD"
        assert settings_store.settings.auto_reorder is True

    def test_unknown_key_rejected(self, settings_store):
        with pytest.raises(KeyError):
            settings_store.update_setting("colour", "red")
        with pytest.raises(KeyError):
            settings_store.update_settings({"theme": "dark", "colour": "red"})
        assert settings_store.settings.theme == "light"

    def test_every_change_persists_whole_record(self, settings_store, storage):
        settings_store.update_setting("expiry_warning_days", "45")
        stored = json.loads(storage.load(SETTINGS_KEY))
        assert stored["expiry_warning_days"] == 45
        assert set(stored) == set(Settings().as_dict())

    def test_update_settings_partial(self, settings_store, storage):
        settings_store.update_settings({"low_stock_threshold": "4", "theme": "dark"})
        assert settings_store.settings.low_stock_threshold == 4
        assert settings_store.settings.theme == "dark"
        assert json.loads(storage.load(SETTINGS_KEY))["theme"] == "dark"

    def test_no_persistence_before_load(self, storage):
        store = SettingsStore(storage)
        store.update_setting("low_stock_threshold", 3)
        assert store.settings.low_stock_threshold == 3
        assert storage.load(SETTINGS_KEY) is None

    def test_save_failure_keeps_memory_state(self, broken_storage):
        store = SettingsStore(broken_storage)
        store.load()
        store.update_setting("low_stock_threshold", 7)
        assert store.settings.low_stock_threshold == 7
        assert store.save() is False

    def test_infinite_threshold_resets_to_default(self, settings_store, storage):
        settings_store.update_setting("low_stock_threshold", float("inf"))
        assert settings_store.settings.low_stock_threshold == 10
        assert json.loads(storage.load(SETTINGS_KEY))["low_stock_threshold"] == 10

    def test_sessions_sharing_storage_keep_each_others_changes(self, storage):
        first = SettingsStore(storage)
        first.load()
        second = SettingsStore(storage)
        second.load()
        first.update_setting("low_stock_threshold", 4)
        second.update_setting("expiry_warning_days", 60)
        assert second.settings.low_stock_threshold == 4

        reloaded = SettingsStore(storage)
        reloaded.load()
        assert reloaded.settings.low_stock_threshold == 4
        assert reloaded.settings.expiry_warning_days == 60

    def test_own_change_wins_on_the_same_key(self, storage):
        first = SettingsStore(storage)
        first.load()
        second = SettingsStore(storage)
        second.load()
        first.update_setting("theme", "dark")
        second.update_setting("theme", "light")
        reloaded = SettingsStore(storage)
        reloaded.load()
        assert reloaded.settings.theme == "light"

    def test_settings_are_read_only(self, settings_store):
        with pytest.raises(FrozenInstanceError):
            settings_store.settings.low_stock_threshold = 1


class TestNotices:

    def test_watched_changes_announced(self, settings_store, notices):
        settings_store.update_setting("expiry_warning_days", 60)
        settings_store.update_setting("low_stock_threshold", 3)
        settings_store.update_setting("expiry_alerts", False)
        assert len(notices) == 3
        assert "60" in notices[0]
        assert "3" in notices[1]
        assert notices[2] == "Expiry alerts disabled"

    def test_unchanged_value_not_announced(self, settings_store, notices):
        settings_store.update_setting("low_stock_threshold", "10")
        settings_store.update_setting("expiry_alerts", True)
        assert notices == []

    def test_unwatched_keys_not_announced(self, settings_store, notices):
        settings_store.update_setting("theme", "dark")
        settings_store.update_setting("low_stock_alerts", False)
        assert notices == []

    def test_silent_before_load(self, storage):
        notices = []
        store = SettingsStore(storage, notifier=notices.append)
        store.update_setting("expiry_warning_days", 60)
        assert notices == []


class TestBoundChecks:

    def test_checks_follow_current_settings(self, settings_store, today):
        assert settings_store.is_stock_low(12) is False
        settings_store.update_setting("low_stock_threshold", 15)
        assert settings_store.is_stock_low(12) is True
        assert settings_store.is_stock_out(0) is True

        soon = today + timedelta(days=40)
        assert settings_store.is_product_expiring_soon(soon, today) is False
        assert settings_store.get_expiry_status(soon, today).status == "good"
        settings_store.update_setting("expiry_warning_days", 45)
        assert settings_store.is_product_expiring_soon(soon, today) is True
        assert settings_store.get_expiry_status(soon, today).status == "warning"
        assert settings_store.is_product_expired(today - timedelta(days=1), today) is True
