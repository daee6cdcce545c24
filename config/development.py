import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "farm_payroll"),
}

DEBUG = True

# Anchor weekday of the pay week (Sunday..Saturday)
PAYMENT_DAY = os.getenv("PAYMENT_DAY", "Sunday")

TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "168"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo owner and workers on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
