"""Reusable UI components."""
import pandas as pd
import streamlit as st

STATUS_ICONS = {
    "expired": "\U0001F534",
    "critical": "\U0001F534",
    "warning": "\U0001F7E1",
    "good": "\U0001F7E2",
    "no-expiry": "⚪",
}


def format_expiry(status: str, days) -> str:
    """Human label for an expiry status, e.g. '🟡 warning (20 days)'."""
    icon = STATUS_ICONS.get(status, "")
    if days is None or pd.isna(days):
        return f"{icon} {status}".strip()
    if status == "expired":
        return f"{icon} expired {int(days)} day(s) ago"
    return f"{icon} {status} ({int(days)} day(s) left)"


def render_products_table(df: pd.DataFrame):
    """Render flagged products (output of `flag_products`) as a table."""
    if df.empty:
        st.info("No products to show")
        return

    display_df = df.copy()
    display_df["expiry"] = [
        format_expiry(s, d)
        for s, d in zip(display_df["expiry_status"], display_df["expiry_days"])
    ]
    table_cols = ["name", "category", "quantity", "stock_status", "expiration_date", "expiry"]
    for c in table_cols:
        if c not in display_df.columns:
            display_df[c] = ""
    display_df = display_df[table_cols].rename(
        columns={
            "name": "Name",
            "category": "Category",
            "quantity": "Stock",
            "stock_status": "Stock Status",
            "expiration_date": "Expiration",
            "expiry": "Expiry Status",
        }
    )
    st.dataframe(display_df, width='stretch', hide_index=True)
