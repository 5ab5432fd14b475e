"""Alert history page: dismissal log, statistics and CSV export."""
from datetime import timedelta

import pandas as pd
import plotly.express as px
import streamlit as st

from core.constants import ALERT_TYPES
from core.reports import export_history_csv, history_frame
from core.thresholds import today_local


def render(alert_store):
    """Render the alert history page."""
    st.header("🗂️ Alert History")
    if st.session_state.get("history_cleared"):
        st.toast("Alert history cleared", icon="🗑️")
        del st.session_state["history_cleared"]

    stats = alert_store.get_alert_stats()
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Dismissed", stats.total)
    col2.metric("Errors", stats.by_type.get("error", 0))
    col3.metric("Warnings", stats.by_type.get("warning", 0))
    col4.metric("Info", stats.by_type.get("info", 0))

    if stats.by_day:
        per_day = pd.DataFrame(
            sorted(stats.by_day.items()), columns=["day", "dismissed"]
        )
        fig = px.bar(
            per_day, x="day", y="dismissed",
            labels={"day": "Day", "dismissed": "Dismissed Alerts"},
        )
        st.plotly_chart(fig, width='stretch')

    if stats.recent:
        st.subheader("Recently Dismissed")
        st.dataframe(history_frame(stats.recent), width='stretch', hide_index=True)

    st.subheader("History")
    col1, col2 = st.columns(2)
    type_choice = col1.selectbox("Type", ["All"] + ALERT_TYPES)
    today = today_local()
    days = col2.selectbox("Last", [1, 7, 30, 90, "All"], index=4)
    filter_type = None if type_choice == "All" else type_choice
    date_range = None if days == "All" else (today - timedelta(days=days - 1), today)

    entries = alert_store.get_alert_history(filter_type, date_range)
    if not entries:
        st.info("No dismissed alerts in this period")
    else:
        st.dataframe(history_frame(entries), width='stretch', hide_index=True)
        st.download_button(
            "Download CSV",
            data=export_history_csv(entries),
            file_name=f"alert_history_{today.isoformat()}.csv",
            mime="text/csv",
        )

    st.divider()
    with st.expander("🗑️ Reset dismissed alerts"):
        st.warning(
            "This brings back every dismissed alert and erases the history. "
            "It cannot be undone."
        )
        confirm = st.checkbox("I understand", key="confirm_clear_alerts")
        if st.button("Clear dismissed alerts", disabled=not confirm):
            alert_store.clear_dismissed_alerts()
            st.session_state.history_cleared = True
            st.rerun()
