"""Alert history export for the reporting view."""
from __future__ import annotations

import json
from typing import Iterable

import pandas as pd

from core.alert_store import AlertHistoryEntry

EXPORT_COLUMNS = ["Date", "Type", "Product Name", "Details"]
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def history_frame(entries: Iterable[AlertHistoryEntry]) -> pd.DataFrame:
    """One row per entry, in the order given (callers pass filtered/sorted history)."""
    rows = [
        {
            "Date": e.dismissed_at.strftime(DATE_FORMAT),
            "Type": e.type,
            "Product Name": e.product_name,
            "Details": json.dumps(dict(e.details)),
        }
        for e in entries
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_history_csv(entries: Iterable[AlertHistoryEntry], sep: str = ",") -> str:
    return history_frame(entries).to_csv(index=False, sep=sep)
