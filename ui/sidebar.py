"""Sidebar navigation menu."""
import streamlit as st

from core.constants import (
    MENU_ALERTS,
    MENU_DASHBOARD,
    MENU_HISTORY,
    MENU_INVENTORY,
    MENU_SETTINGS,
)

MENU = [MENU_DASHBOARD, MENU_INVENTORY, MENU_ALERTS, MENU_HISTORY, MENU_SETTINGS]


def render_sidebar_menu(alert_count: int = 0):
    """Render the sidebar navigation menu with the active alert count."""
    if (
        "menu_selection" not in st.session_state
        or st.session_state.menu_selection not in MENU
    ):
        st.session_state.menu_selection = MENU[0]
    selected = st.sidebar.radio("Select Page", MENU, key="menu_selection")

    if alert_count:
        st.sidebar.warning(f"{alert_count} product alert(s) need attention")
    else:
        st.sidebar.success("No active product alerts")
    return selected
