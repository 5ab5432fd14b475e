"""Alert settings: thresholds and toggles, persisted per session.

Usage:
    store = SettingsStore(storage, notifier=st.toast)
    store.load()
    store.update_setting("low_stock_threshold", "15")
    store.is_stock_low(12)  # True
"""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional

from core import thresholds
from core.constants import (
    CURRENCIES,
    EXPIRY_WARNING_DAYS_DEFAULT,
    LOW_STOCK_THRESHOLD_DEFAULT,
    SETTINGS_KEY,
    THEMES,
)
from core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

THRESHOLD_DEFAULTS: Dict[str, int] = {
    "low_stock_threshold": LOW_STOCK_THRESHOLD_DEFAULT,
    "expiry_warning_days": EXPIRY_WARNING_DAYS_DEFAULT,
}
# Changes to these keys are announced to the user
WATCHED_KEYS = ("expiry_warning_days", "low_stock_threshold", "expiry_alerts")


@dataclass(frozen=True)
class Settings:
    """Alert configuration consumed by the threshold checks."""

    low_stock_threshold: int = LOW_STOCK_THRESHOLD_DEFAULT
    expiry_warning_days: int = EXPIRY_WARNING_DAYS_DEFAULT

    # Notification toggles
    expiry_alerts: bool = True
    low_stock_alerts: bool = True
    movement_alerts: bool = True

    # Preferences kept alongside the thresholds
    auto_reorder: bool = False
    barcode_scanning: bool = True
    theme: str = THEMES[0]
    currency: str = CURRENCIES[0]

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def coerce_threshold(key: str, value: Any) -> int:
    """Turn form input into a non-negative threshold.

    Empty, non-numeric and negative input falls back to the key's default.
    """
    default = THRESHOLD_DEFAULTS[key]
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number >= 0 else default


def settings_from_mapping(stored: Mapping[str, Any]) -> Settings:
    """Merge a stored record over the defaults; unknown keys are dropped."""
    values = {
        k: v for k, v in stored.items()
        if k in Settings.__dataclass_fields__
    }
    for key in THRESHOLD_DEFAULTS:
        if key in values:
            values[key] = coerce_threshold(key, values[key])
    return Settings(**values)


def describe_change(key: str, value: Any) -> str:
    if key == "expiry_warning_days":
        return f"Expiry alerts will now use a {value} day threshold"
    if key == "low_stock_threshold":
        return f"Low stock alerts will now trigger at {value} units or fewer"
    return "Expiry alerts enabled" if value else "Expiry alerts disabled"


class SettingsStore:
    """Single owner of the session's Settings.

    Mutations go through ``update_setting``/``update_settings``; once the
    initial load has completed every mutation is written to storage whole.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        notifier: Optional[Callable[[str], Any]] = None,
    ):
        self.storage = storage
        self.notifier = notifier
        self._settings = Settings()
        # Keys this session has changed since load
        self._changed: set = set()
        self.is_loaded = False

    @property
    def settings(self) -> Settings:
        return self._settings

    def _read_stored(self) -> Settings:
        raw = self.storage.load(SETTINGS_KEY)
        if not raw:
            return Settings()
        stored = json.loads(raw)
        if not isinstance(stored, dict):
            raise ValueError(f"Stored settings is {type(stored).__name__}, not an object")
        return settings_from_mapping(stored)

    def load(self) -> Settings:
        """Hydrate from storage. Any read or parse failure means defaults."""
        try:
            settings = self._read_stored()
        except Exception:
            logger.exception("Failed to load settings, using defaults")
            settings = Settings()
        self._settings = settings
        self._changed = set()
        self.is_loaded = True
        return settings

    def save(self) -> bool:
        """Write the full settings record. Returns False if storage failed.

        The stored record is shared with other sessions: it is re-read and
        only the keys changed in this session are laid over it.
        """
        with self.storage.lock:
            try:
                stored = self._read_stored()
            except Exception:
                logger.exception("Failed to read settings before saving")
                stored = self._settings
            merged = dataclasses.replace(
                stored, **{k: getattr(self._settings, k) for k in self._changed}
            )
            self._settings = merged
            try:
                self.storage.save(SETTINGS_KEY, json.dumps(merged.as_dict()))
                return True
            except Exception:
                logger.exception("Failed to save settings")
                return False

    def _apply(self, key: str, value: Any) -> None:
        if key not in Settings.__dataclass_fields__:
            raise KeyError(f"Unknown setting: {key}")
        if key in THRESHOLD_DEFAULTS:
            value = coerce_threshold(key, value)
        old = getattr(self._settings, key)
        self._settings = dataclasses.replace(self._settings, **{key: value})
        self._changed.add(key)
        logger.debug("Setting %s changed from %r to %r", key, old, value)
        if (
            self.is_loaded
            and key in WATCHED_KEYS
            and old != value
            and self.notifier is not None
        ):
            self.notifier(describe_change(key, value))

    def update_setting(self, key: str, value: Any) -> None:
        self._apply(key, value)
        if self.is_loaded:
            self.save()

    def update_settings(self, partial: Mapping[str, Any]) -> None:
        unknown = [k for k in partial if k not in Settings.__dataclass_fields__]
        if unknown:
            raise KeyError(f"Unknown setting(s): {', '.join(unknown)}")
        for key, value in partial.items():
            self._apply(key, value)
        if self.is_loaded:
            self.save()

    # Threshold checks bound to the current settings

    def is_product_expiring_soon(self, expiration, today: Optional[date] = None) -> bool:
        return thresholds.is_expiring_soon(expiration, self._settings, today)

    def is_product_expired(self, expiration, today: Optional[date] = None) -> bool:
        return thresholds.is_expired(expiration, today)

    def is_stock_low(self, quantity) -> bool:
        return thresholds.is_stock_low(quantity, self._settings)

    def is_stock_out(self, quantity) -> bool:
        return thresholds.is_stock_out(quantity, self._settings)

    def get_expiry_status(self, expiration, today: Optional[date] = None) -> thresholds.ExpiryStatus:
        return thresholds.get_expiry_status(expiration, self._settings, today)
