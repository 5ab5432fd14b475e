"""Dashboard page with stock and expiry overview."""
import pandas as pd
import plotly.express as px
import streamlit as st

from core.notifications import flag_products
from core.services import get_products

EXPIRY_COLORS = {
    "expired": "#B91C1C",
    "critical": "#F54F52",
    "warning": "#FFEC21",
    "good": "#93F03B",
    "no-expiry": "#9CA3AF",
}


def render(conn, settings_store):
    """Render the dashboard page."""
    st.header("📊 Inventory Overview")
    df = get_products(conn)
    if df.empty:
        st.info("No products available")
        return

    settings = settings_store.settings
    df = flag_products(df, settings)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Products", len(df))
    col2.metric("Total Items", int(pd.to_numeric(df["quantity"], errors="coerce").fillna(0).sum()))
    col3.metric(f"Low Stock (≤{settings.low_stock_threshold})", int((df["stock_status"] == "low-stock").sum()))
    col4.metric("Out of Stock", int((df["stock_status"] == "out-of-stock").sum()))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Expired", int((df["expiry_status"] == "expired").sum()))
    col2.metric("Critical (≤7 days)", int((df["expiry_status"] == "critical").sum()))
    col3.metric(f"Warning (≤{settings.expiry_warning_days} days)", int((df["expiry_status"] == "warning").sum()))
    col4.metric("No Expiry", int((df["expiry_status"] == "no-expiry").sum()))

    st.markdown("---")

    st.subheader("📅 Products by Expiry Status")
    expiry_counts = df.groupby("expiry_status").size().reset_index(name="products")
    fig = px.pie(
        expiry_counts,
        values="products",
        names="expiry_status",
        title="Expiry Status",
        color="expiry_status",
        color_discrete_map=EXPIRY_COLORS,
    )
    st.plotly_chart(fig, width='stretch')

    st.subheader("📦 Products by Stock Status")
    stock_counts = df.groupby("stock_status").size().reset_index(name="products")
    fig = px.bar(
        stock_counts,
        x="stock_status",
        y="products",
        labels={"stock_status": "Stock Status", "products": "Products"},
        color="stock_status",
    )
    st.plotly_chart(fig, width='stretch')
