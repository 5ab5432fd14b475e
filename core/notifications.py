"""Inventory alerts derived from the product table.

Products are grouped into four alerts (expired, expiring soon, out of
stock, low stock). Each group has a fixed identifier so a dismissal
silences it until the dismissed alerts are cleared.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

import pandas as pd

from core import thresholds
from core.alert_store import AlertLifecycleStore
from core.constants import (
    ALERT_EXPIRED,
    ALERT_EXPIRING,
    ALERT_LOW_STOCK,
    ALERT_OUT_OF_STOCK,
    NOTIFICATION_COOLDOWN_SECONDS,
    NOTIFICATION_PREVIEW_NAMES,
)
from core.settings_store import Settings, SettingsStore

logger = logging.getLogger(__name__)

NAME_COLUMNS = ("name", "product_name")
QUANTITY_COLUMNS = ("quantity", "product_quantity", "current_stock")
EXPIRATION_COLUMNS = ("expiration_date", "earliest_expiration", "expiration")


@dataclass(frozen=True)
class InventoryAlert:
    alert_id: str
    alert_type: str
    message: str
    product_names: Tuple[str, ...]


def _column(df: pd.DataFrame, candidates) -> pd.Series:
    for col in candidates:
        if col in df.columns:
            return df[col]
    return pd.Series([None] * len(df), index=df.index, dtype=object)


def _preview(names: List[str]) -> str:
    shown = ", ".join(names[:NOTIFICATION_PREVIEW_NAMES])
    extra = len(names) - NOTIFICATION_PREVIEW_NAMES
    return f"{shown} and {extra} more" if extra > 0 else shown


def flag_products(
    products: pd.DataFrame, settings: Settings, today: Optional[date] = None
) -> pd.DataFrame:
    """Copy of the product table with expiry and stock status columns added."""
    df = products.copy()
    expirations = _column(df, EXPIRATION_COLUMNS)
    quantities = _column(df, QUANTITY_COLUMNS)
    statuses = [thresholds.get_expiry_status(d, settings, today) for d in expirations]
    df["expiry_status"] = [s.status for s in statuses]
    df["expiry_color"] = [s.color for s in statuses]
    df["expiry_days"] = pd.Series([s.days for s in statuses], index=df.index, dtype=object)
    df["stock_status"] = [thresholds.get_stock_status(q, settings) for q in quantities]
    return df


def build_alerts(
    products: pd.DataFrame, settings: Settings, today: Optional[date] = None
) -> List[InventoryAlert]:
    """Group flagged products into alerts, most severe first."""
    if products.empty:
        return []
    names = _column(products, NAME_COLUMNS).fillna("").astype(str)
    expirations = _column(products, EXPIRATION_COLUMNS)
    quantities = _column(products, QUANTITY_COLUMNS)

    expired = expirations.apply(lambda d: thresholds.is_expired(d, today)).astype(bool)
    expiring = expirations.apply(
        lambda d: thresholds.is_expiring_soon(d, settings, today)
    ).astype(bool) & ~expired
    out_of_stock = quantities.apply(lambda q: thresholds.is_stock_out(q, settings)).astype(bool)
    low_stock = quantities.apply(
        lambda q: thresholds.is_stock_low(q, settings)
    ).astype(bool) & settings.low_stock_alerts

    groups = [
        (ALERT_EXPIRED, "error", expired,
         "\U0001F6A8 {n} product(s) have EXPIRED! {names}"),
        (ALERT_EXPIRING, "warning", expiring,
         f"⚠️ {{n}} product(s) expiring within {settings.expiry_warning_days} days. {{names}}"),
        (ALERT_OUT_OF_STOCK, "error", out_of_stock,
         "\U0001F4E6 {n} product(s) are OUT OF STOCK! {names}"),
        (ALERT_LOW_STOCK, "warning", low_stock,
         f"\U0001F4C9 {{n}} product(s) are running LOW (≤{settings.low_stock_threshold} units). {{names}}"),
    ]
    alerts = []
    for alert_id, alert_type, mask, template in groups:
        flagged = names[mask].tolist()
        if not flagged:
            continue
        alerts.append(InventoryAlert(
            alert_id=alert_id,
            alert_type=alert_type,
            message=template.format(n=len(flagged), names=_preview(flagged)),
            product_names=tuple(flagged),
        ))
    return alerts


def count_alerts(
    products: pd.DataFrame, settings: Settings, today: Optional[date] = None
) -> int:
    """Number of flagged products across all alert groups."""
    return sum(len(a.product_names) for a in build_alerts(products, settings, today))


class AlertNotifier:
    """Hands out undismissed alerts at most once per cooldown window."""

    def __init__(
        self,
        settings_store: SettingsStore,
        alert_store: AlertLifecycleStore,
        cooldown: float = NOTIFICATION_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings_store = settings_store
        self.alert_store = alert_store
        self.cooldown = cooldown
        self.clock = clock
        self._last_shown: Optional[float] = None

    def active_alerts(
        self, products: pd.DataFrame, today: Optional[date] = None
    ) -> List[InventoryAlert]:
        return [
            a for a in build_alerts(products, self.settings_store.settings, today)
            if not self.alert_store.is_alert_dismissed(a.alert_id)
        ]

    def pending(
        self, products: pd.DataFrame, today: Optional[date] = None
    ) -> List[InventoryAlert]:
        """Alerts to announce now; empty while the cooldown is running."""
        if products.empty:
            return []
        now = self.clock()
        if self._last_shown is not None and now - self._last_shown < self.cooldown:
            return []
        self._last_shown = now
        alerts = self.active_alerts(products, today)
        logger.debug("Announcing %d inventory alert(s)", len(alerts))
        return alerts

    def dismiss(self, alert: InventoryAlert) -> None:
        self.alert_store.dismiss_alert(
            alert.alert_id,
            alert.alert_type,
            ", ".join(alert.product_names),
            {"productCount": len(alert.product_names)},
        )
