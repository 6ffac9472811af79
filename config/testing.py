import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_schedule_test"),
    "connection_timeout": 5,
}

DEBUG = False
TESTING = True

STORAGE = os.getenv("STORAGE", "memory")
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

TIMEZONE = "UTC"
DAILY_OVERTIME_CAP_MINUTES = 240
LOCK_TIMEOUT_SECONDS = 2.0

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
