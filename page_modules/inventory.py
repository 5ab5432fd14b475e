"""Inventory view page."""
import streamlit as st

from core.notifications import flag_products
from core.services import get_products
from ui.components import render_products_table

STOCK_FILTERS = ["in-stock", "low-stock", "out-of-stock"]
EXPIRY_FILTERS = ["expired", "critical", "warning", "good", "no-expiry"]


def render(conn, settings_store):
    """Render the inventory page."""
    st.header("📋 Inventory")
    df = get_products(conn)

    search = st.text_input("Search by name or category")
    col1, col2 = st.columns(2)
    stock_filter = col1.multiselect("Stock status", STOCK_FILTERS, default=STOCK_FILTERS)
    expiry_filter = col2.multiselect("Expiry status", EXPIRY_FILTERS, default=EXPIRY_FILTERS)

    if not df.empty:
        df = flag_products(df, settings_store.settings)
        if search:
            mask = df["name"].str.contains(search, case=False, na=False, regex=False)
            if "category" in df.columns:
                mask = mask | df["category"].str.contains(search, case=False, na=False, regex=False)
            df = df[mask]
        df = df[df["stock_status"].isin(stock_filter) & df["expiry_status"].isin(expiry_filter)]
        df = df.sort_values("name", key=lambda s: s.str.casefold())
    render_products_table(df)
