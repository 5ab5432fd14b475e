"""Per-session stores kept in ``st.session_state``.

Pages never build stores themselves: app.py fetches them here once per
rerun and passes them down.
"""
import logging

import streamlit as st

from core.alert_store import AlertLifecycleStore
from core.constants import STORAGE_FILE_DEFAULT
from core.notifications import AlertNotifier
from core.services import DBConnection
from core.settings_store import SettingsStore
from core.storage import DatabaseStorage, JsonFileStorage, KeyValueStorage

logger = logging.getLogger(__name__)


def get_storage(conn: DBConnection) -> KeyValueStorage:
    """Storage backend from `[storage]` secrets (database by default)."""
    backend, path = "database", STORAGE_FILE_DEFAULT
    try:
        if 'storage' in st.secrets:
            backend = st.secrets["storage"].get("backend", backend)
            path = st.secrets["storage"].get("path", path)
    except Exception:
        logger.info("No storage secrets found, using database storage")
    if backend == "file":
        return JsonFileStorage(path)
    return DatabaseStorage(conn)


def _toast(message: str) -> None:
    st.toast(message, icon="⚙️")


def get_settings_store(conn: DBConnection) -> SettingsStore:
    if "settings_store" not in st.session_state:
        store = SettingsStore(get_storage(conn), notifier=_toast)
        store.load()
        st.session_state.settings_store = store
    return st.session_state.settings_store


def get_alert_store(conn: DBConnection) -> AlertLifecycleStore:
    if "alert_store" not in st.session_state:
        store = AlertLifecycleStore(get_storage(conn))
        store.load()
        st.session_state.alert_store = store
    return st.session_state.alert_store


def get_notifier(conn: DBConnection) -> AlertNotifier:
    if "alert_notifier" not in st.session_state:
        st.session_state.alert_notifier = AlertNotifier(
            get_settings_store(conn), get_alert_store(conn)
        )
    return st.session_state.alert_notifier
