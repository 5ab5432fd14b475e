"""Pharmacy Inventory Alerts - Main Application Entry Point."""
import logging

import streamlit as st

from core.db_init import init_db
from core.notifications import count_alerts
from core.services import get_products
from core.session import get_alert_store, get_notifier, get_settings_store
from core.constants import (
    MENU_ALERTS,
    MENU_DASHBOARD,
    MENU_HISTORY,
    MENU_INVENTORY,
    MENU_SETTINGS,
)
from ui.sidebar import render_sidebar_menu

# Page modules
from page_modules import alert_history, alerts, dashboard, inventory, settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Page configuration
st.set_page_config(
    page_title="Inventory Alerts",
    page_icon="💊",
    layout="wide",
)


# Initialize database connection (cached to avoid reconnecting on every interaction)
@st.cache_resource
def get_db_connection():
    return init_db()


conn = get_db_connection()

# One store of each kind per browser session
settings_store = get_settings_store(conn)
alert_store = get_alert_store(conn)
notifier = get_notifier(conn)

products = get_products(conn)

# Announce undismissed alerts (at most once per cooldown window)
for alert in notifier.pending(products):
    st.toast(alert.message, icon="🚨" if alert.alert_type == "error" else "⚠️")

menu = render_sidebar_menu(count_alerts(products, settings_store.settings))

# Page routing
pages = {
    MENU_DASHBOARD: lambda: dashboard.render(conn, settings_store),
    MENU_INVENTORY: lambda: inventory.render(conn, settings_store),
    MENU_ALERTS: lambda: alerts.render(conn, settings_store, alert_store, notifier),
    MENU_HISTORY: lambda: alert_history.render(alert_store),
    MENU_SETTINGS: lambda: settings.render(settings_store),
}

if menu not in pages:
    menu = MENU_DASHBOARD
pages[menu]()
