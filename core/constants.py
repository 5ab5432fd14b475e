# ---------- constants.py ----------
"""Project-wide constants and configuration defaults."""
from typing import List
from zoneinfo import ZoneInfo

# Store timezone (used for "today" and dismissal timestamps)
APP_TZ = ZoneInfo("Asia/Manila")

LOW_STOCK_THRESHOLD_DEFAULT: int = 10
EXPIRY_WARNING_DAYS_DEFAULT: int = 30
# Fixed critical band, not user-configurable
CRITICAL_EXPIRY_DAYS: int = 7

ALERT_TYPES: List[str] = ["error", "warning", "info"]
RECENT_ALERTS_LIMIT: int = 10
NOTIFICATION_COOLDOWN_SECONDS: int = 300
NOTIFICATION_PREVIEW_NAMES: int = 3

# Durable storage record keys
DISMISSED_ALERTS_KEY = "dismissed-alerts"
SETTINGS_KEY = "settings"

STORAGE_FILE_DEFAULT = ".streamlit/app_storage.json"
SQLITE_PATH_DEFAULT = "data/inventory.db"

THEMES: List[str] = ["light", "dark", "auto"]
CURRENCIES: List[str] = ["PHP", "USD", "EUR"]

# Grouped alert identifiers
ALERT_EXPIRED = "expired-products"
ALERT_EXPIRING = "expiring-products"
ALERT_OUT_OF_STOCK = "out-of-stock"
ALERT_LOW_STOCK = "low-stock"

# Sidebar menu labels (keep in sync across app and sidebar)
MENU_DASHBOARD = "\U0001F4CA Dashboard"
MENU_INVENTORY = "\U0001F4CB Inventory"
MENU_ALERTS = "⚠️ Stock Alerts"
MENU_HISTORY = "\U0001F5C2️ Alert History"
MENU_SETTINGS = "⚙️ Settings"
