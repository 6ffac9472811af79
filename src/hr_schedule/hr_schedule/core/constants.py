"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DAILY_OVERTIME_CAP_MINUTES = 240
DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0
MAX_LOCK_TIMEOUT_SECONDS = 60.0
DEFAULT_TIMEZONE = "UTC"
DEFAULT_PENDING_LIMIT = 500
DEFAULT_HISTORY_LIMIT = 200
