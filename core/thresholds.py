"""Threshold evaluation for stock quantities and expiration dates.

Pure functions: every classification takes the current settings (anything
with ``low_stock_threshold``, ``expiry_warning_days`` and ``expiry_alerts``
attributes) plus an optional ``today`` so results are reproducible.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import NamedTuple, Optional

import pandas as pd

from core.constants import APP_TZ, CRITICAL_EXPIRY_DAYS

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ExpiryStatus(NamedTuple):
    status: str
    color: str
    days: Optional[int]


def today_local() -> date:
    """Current calendar date in the store timezone."""
    return datetime.now(APP_TZ).date()


def to_date(value) -> Optional[date]:
    """Normalize an expiration value to a calendar date.

    Accepts ``date``/``datetime``/``pd.Timestamp`` and ISO strings.
    Empty, missing (None/NaN/NaT) and unparseable values give None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            parsed = pd.to_datetime(value, errors="coerce")
            return None if pd.isna(parsed) else parsed.date()
    if pd.isna(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def parse_quantity(value) -> int:
    """Read a quantity the lenient way forms submit it.

    Leading integer digits win ("12 pcs" -> 12); anything else is 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def days_until_expiry(expiration, today: Optional[date] = None) -> Optional[int]:
    """Whole calendar days from today to the expiration date (negative once past)."""
    exp = to_date(expiration)
    if exp is None:
        return None
    return (exp - (today or today_local())).days


def is_expiring_soon(expiration, settings, today: Optional[date] = None) -> bool:
    """Expiring within the warning window; already-expired items are excluded."""
    if not settings.expiry_alerts:
        return False
    days = days_until_expiry(expiration, today)
    if days is None:
        return False
    return 0 < days <= settings.expiry_warning_days


def is_expired(expiration, today: Optional[date] = None) -> bool:
    exp = to_date(expiration)
    if exp is None:
        return False
    return exp < (today or today_local())


def get_expiry_status(expiration, settings, today: Optional[date] = None) -> ExpiryStatus:
    """Classify an expiration date.

    The critical band (<= 7 days) always wins over a wider warning window.
    """
    days = days_until_expiry(expiration, today)
    if days is None:
        return ExpiryStatus("no-expiry", "gray", None)
    if days < 0:
        return ExpiryStatus("expired", "red", abs(days))
    if days <= CRITICAL_EXPIRY_DAYS:
        return ExpiryStatus("critical", "red", days)
    if days <= settings.expiry_warning_days:
        return ExpiryStatus("warning", "yellow", days)
    return ExpiryStatus("good", "green", days)


def is_stock_low(quantity, settings) -> bool:
    qty = parse_quantity(quantity)
    return 0 < qty <= settings.low_stock_threshold


def is_stock_out(quantity, settings=None) -> bool:
    return parse_quantity(quantity) == 0


def get_stock_status(quantity, settings) -> str:
    """in-stock / low-stock / out-of-stock.

    Negative quantities are neither low nor out, so they read as in-stock.
    """
    if is_stock_out(quantity, settings):
        return "out-of-stock"
    if is_stock_low(quantity, settings):
        return "low-stock"
    return "in-stock"
