"""Settings page for alert thresholds and notification toggles."""
import streamlit as st

from core.constants import CURRENCIES, THEMES
from core.settings_store import THRESHOLD_DEFAULTS

TOGGLES = [
    ("low_stock_alerts", "Low stock alerts"),
    ("expiry_alerts", "Expiry alerts"),
    ("movement_alerts", "Movement alerts"),
]


def _widget_key(key: str) -> str:
    return f"setting_{key}"


def _on_change(settings_store, key):
    widget_key = _widget_key(key)
    settings_store.update_setting(key, st.session_state[widget_key])
    if key in THRESHOLD_DEFAULTS:
        # Show the stored value (empty input falls back to the default)
        st.session_state[widget_key] = str(getattr(settings_store.settings, key))


def _seed_widgets(settings):
    for key, value in settings.as_dict().items():
        widget_key = _widget_key(key)
        if widget_key not in st.session_state:
            st.session_state[widget_key] = str(value) if key in THRESHOLD_DEFAULTS else value


def render(settings_store):
    """Render the settings page. Every change is applied and saved immediately."""
    st.header("⚙️ Settings")
    _seed_widgets(settings_store.settings)

    st.subheader("🔔 Notification Settings")
    for key, label in TOGGLES:
        st.toggle(
            label,
            key=_widget_key(key),
            on_change=_on_change,
            args=(settings_store, key),
        )

    st.subheader("📦 Inventory Settings")
    col1, col2 = st.columns(2)
    # Text inputs so an empty value can fall back to the default
    col1.text_input(
        "Low Stock Threshold",
        key=_widget_key("low_stock_threshold"),
        help=f"Empty or invalid input resets to {THRESHOLD_DEFAULTS['low_stock_threshold']}",
        on_change=_on_change,
        args=(settings_store, "low_stock_threshold"),
    )
    col2.text_input(
        "Expiry Warning Days",
        key=_widget_key("expiry_warning_days"),
        help=f"Empty or invalid input resets to {THRESHOLD_DEFAULTS['expiry_warning_days']}",
        on_change=_on_change,
        args=(settings_store, "expiry_warning_days"),
    )
    st.toggle(
        "Auto reorder",
        key=_widget_key("auto_reorder"),
        on_change=_on_change,
        args=(settings_store, "auto_reorder"),
    )
    st.toggle(
        "Barcode scanning",
        key=_widget_key("barcode_scanning"),
        on_change=_on_change,
        args=(settings_store, "barcode_scanning"),
    )

    st.subheader("🎨 Display Preferences")
    st.caption(
        "Stored with your settings for other back-office screens; "
        "this app does not apply them yet."
    )
    col1, col2 = st.columns(2)
    col1.selectbox(
        "Theme",
        THEMES,
        key=_widget_key("theme"),
        on_change=_on_change,
        args=(settings_store, "theme"),
    )
    col2.selectbox(
        "Currency",
        CURRENCIES,
        key=_widget_key("currency"),
        on_change=_on_change,
        args=(settings_store, "currency"),
    )

    st.divider()
    if st.button("💾 Save Settings"):
        if settings_store.save():
            st.toast(
                f"Settings saved! Expiry alerts will now use "
                f"{settings_store.settings.expiry_warning_days} days threshold.",
                icon="✅",
            )
        else:
            st.toast("Failed to save settings!", icon="❌")
