"""Stock alerts page: active alerts with dismiss actions."""
import streamlit as st

from core.notifications import flag_products
from core.services import get_products
from ui.components import render_products_table


def render(conn, settings_store, alert_store, notifier):
    """Render the stock alerts page."""
    st.header("⚠️ Stock Alerts")
    settings = settings_store.settings
    st.caption(
        f"Low stock at ≤{settings.low_stock_threshold} units · "
        f"expiry warning at ≤{settings.expiry_warning_days} days"
    )
    if st.session_state.get("alert_dismissed_msg"):
        st.toast(st.session_state.pop("alert_dismissed_msg"), icon="✅")

    df = get_products(conn)
    active = notifier.active_alerts(df)
    if not active:
        st.success("No active alerts")
    for alert in active:
        box = st.error if alert.alert_type == "error" else st.warning
        col1, col2 = st.columns([5, 1])
        with col1:
            box(alert.message)
        with col2:
            if st.button("Dismiss", key=f"dismiss_{alert.alert_id}"):
                notifier.dismiss(alert)
                st.session_state.alert_dismissed_msg = "Alert dismissed"
                st.rerun()

    dismissed = sorted(alert_store.dismissed_alerts)
    if dismissed:
        st.caption("Dismissed: " + ", ".join(dismissed))

    if df.empty:
        return
    flagged = flag_products(df, settings)
    expiry_mask = flagged["expiry_status"].isin(["expired", "critical", "warning"])
    if not settings.expiry_alerts:
        # Expired stock is always reported
        expiry_mask = flagged["expiry_status"] == "expired"
    stock_mask = flagged["stock_status"] == "out-of-stock"
    if settings.low_stock_alerts:
        stock_mask = stock_mask | (flagged["stock_status"] == "low-stock")

    st.subheader("📅 Expiry")
    render_products_table(
        flagged[expiry_mask].sort_values("expiry_days", key=lambda s: s.astype(float))
    )
    st.subheader("📦 Stock")
    render_products_table(
        flagged[stock_mask].sort_values("name", key=lambda s: s.str.casefold())
    )
