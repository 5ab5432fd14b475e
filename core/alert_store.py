"""Dismissed alerts and dismissal history for one session.

Only the dismissed-id set is persisted (``dismissed-alerts`` record, a JSON
array); the history lives for the session and feeds the Alert History page.
"""
from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from core.constants import (
    ALERT_TYPES,
    APP_TZ,
    DISMISSED_ALERTS_KEY,
    RECENT_ALERTS_LIMIT,
)
from core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

DetailValue = Union[str, int, float, bool, None]
DateBound = Union[date, datetime, None]


def _now() -> datetime:
    return datetime.now(APP_TZ)


@dataclass(frozen=True)
class AlertHistoryEntry:
    id: str
    type: str
    product_name: str
    dismissed_at: datetime
    details: Mapping[str, DetailValue] = field(default_factory=dict)


@dataclass(frozen=True)
class AlertStats:
    total: int
    by_type: Dict[str, int]
    by_day: Dict[str, int]
    recent: Tuple[AlertHistoryEntry, ...]


def validate_details(details: Optional[Mapping]) -> Mapping[str, DetailValue]:
    """Check a details payload: string keys, primitive values only."""
    if details is None:
        return MappingProxyType({})
    if not isinstance(details, Mapping):
        raise ValueError(f"Alert details must be a mapping, got {type(details).__name__}")
    for key, value in details.items():
        if not isinstance(key, str):
            raise ValueError(f"Alert detail keys must be strings, got {key!r}")
        if value is not None and not isinstance(value, (str, int, float, bool)):
            raise ValueError(
                f"Alert detail {key!r} has unsupported type {type(value).__name__}"
            )
    return MappingProxyType(dict(details))


def _bound(value: DateBound, end: bool) -> Optional[datetime]:
    """Dates cover the whole day; naive datetimes are read in the store timezone."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end else time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=APP_TZ)
    return value


class AlertLifecycleStore:
    """Tracks which alerts the user has dismissed.

    Dismissing is idempotent on the set but every call is recorded in the
    history, in call order.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], datetime] = _now,
    ):
        self.storage = storage
        self.clock = clock
        # dict keeps first-dismissal order for the stored array
        self._dismissed: Dict[str, None] = {}
        self._history: list[AlertHistoryEntry] = []

    @property
    def dismissed_alerts(self) -> frozenset:
        return frozenset(self._dismissed)

    @property
    def alert_history(self) -> Tuple[AlertHistoryEntry, ...]:
        return tuple(self._history)

    def _read_stored(self) -> list:
        raw = self.storage.load(DISMISSED_ALERTS_KEY)
        if not raw:
            return []
        stored = json.loads(raw)
        if not isinstance(stored, list) or not all(isinstance(i, str) for i in stored):
            raise ValueError("Stored dismissed alerts is not a list of strings")
        return stored

    def load(self) -> None:
        """Restore the dismissed set. Failures leave the store empty."""
        try:
            self._dismissed = dict.fromkeys(self._read_stored())
        except Exception:
            logger.exception("Failed to load dismissed alerts")
            self._dismissed = {}

    def _persist(self) -> None:
        """Merge with the stored set (other sessions share it) and write it back."""
        with self.storage.lock:
            try:
                stored = self._read_stored()
            except Exception:
                logger.exception("Failed to read dismissed alerts before saving")
                stored = []
            merged = dict.fromkeys(stored)
            merged.update(self._dismissed)
            self._dismissed = merged
            try:
                self.storage.save(DISMISSED_ALERTS_KEY, json.dumps(list(merged)))
            except Exception:
                logger.exception("Failed to save dismissed alerts")

    def dismiss_alert(
        self,
        alert_id: str,
        alert_type: str,
        product_name: str,
        details: Optional[Mapping] = None,
    ) -> None:
        if alert_type not in ALERT_TYPES:
            raise ValueError(f"Unknown alert type: {alert_type}")
        entry = AlertHistoryEntry(
            id=alert_id,
            type=alert_type,
            product_name=product_name,
            dismissed_at=self.clock(),
            details=validate_details(details),
        )
        self._dismissed[alert_id] = None
        self._history.append(entry)
        logger.info("Alert %s dismissed (%s)", alert_id, alert_type)
        self._persist()

    def is_alert_dismissed(self, alert_id: str) -> bool:
        return alert_id in self._dismissed

    def clear_dismissed_alerts(self) -> None:
        """Forget every dismissal. Irreversible: confirm with the user first."""
        self._dismissed = {}
        self._history = []
        try:
            with self.storage.lock:
                self.storage.remove(DISMISSED_ALERTS_KEY)
        except Exception:
            logger.exception("Failed to remove dismissed alerts from storage")
        logger.info("Dismissed alerts cleared")

    def get_alert_history(
        self,
        filter_type: Optional[str] = None,
        date_range: Optional[Tuple[DateBound, DateBound]] = None,
    ) -> list[AlertHistoryEntry]:
        """History filtered by type and inclusive date range, newest first."""
        entries = list(self._history)
        if filter_type:
            entries = [e for e in entries if e.type == filter_type]
        if date_range:
            start, end = _bound(date_range[0], False), _bound(date_range[1], True)
            if start is not None:
                entries = [e for e in entries if e.dismissed_at >= start]
            if end is not None:
                entries = [e for e in entries if e.dismissed_at <= end]
        return sorted(entries, key=lambda e: e.dismissed_at, reverse=True)

    def get_alert_stats(self) -> AlertStats:
        """Counts over the whole history; ``recent`` keeps insertion order."""
        return AlertStats(
            total=len(self._history),
            by_type=dict(Counter(e.type for e in self._history)),
            by_day=dict(Counter(
                e.dismissed_at.astimezone(APP_TZ).date().isoformat()
                if e.dismissed_at.tzinfo else e.dismissed_at.date().isoformat()
                for e in self._history
            )),
            recent=tuple(self._history[:RECENT_ALERTS_LIMIT]),
        )
