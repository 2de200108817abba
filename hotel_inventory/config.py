import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"
# "json" for log aggregation, "console" for local development
LOG_FORMAT = os.getenv("LOG_FORMAT", "console" if DEBUG else "json").lower()

ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()
IS_PRODUCTION = ENVIRONMENT == "production"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "hotel"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS", "*")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",") if origin.strip()
]

# PMS adapter selection (resolved once at startup by hotel_inventory.pms.factory)
PMS_TYPE = os.getenv("PMS_TYPE", "mock").lower()
PMS_ERROR_RATE = float(os.getenv("PMS_ERROR_RATE", "10"))
PMS_BASE_URL = os.getenv("PMS_BASE_URL")
PMS_API_KEY = os.getenv("PMS_API_KEY")
PMS_TIMEOUT_SECONDS = float(os.getenv("PMS_TIMEOUT_SECONDS", "10"))

# Shared secrets for inbound calls
PMS_WEBHOOK_SECRET = os.getenv("PMS_WEBHOOK_SECRET", "")
PMS_WEBHOOK_ALLOW_UNSIGNED = os.getenv("PMS_WEBHOOK_ALLOW_UNSIGNED", "false").lower() == "true"
CRON_SECRET = os.getenv("CRON_SECRET", "")

# Booking serializer
BOOKING_LOCK_TIMEOUT_MS = int(os.getenv("BOOKING_LOCK_TIMEOUT_MS", "5000"))
BOOKING_REFERENCE_PREFIX = os.getenv("BOOKING_REFERENCE_PREFIX", "HTL")

# Outbound push retry policy: delays are base * 2**attempt (1s, 2s, 4s)
PMS_PUSH_MAX_RETRIES = int(os.getenv("PMS_PUSH_MAX_RETRIES", "3"))
PMS_PUSH_BACKOFF_SECONDS = float(os.getenv("PMS_PUSH_BACKOFF_SECONDS", "1.0"))

# 0 disables the in-process scheduler (cron endpoint only)
INVENTORY_SYNC_INTERVAL_SECONDS = int(os.getenv("INVENTORY_SYNC_INTERVAL_SECONDS", "0"))

# Change notifier; unset means notifications are a no-op
REDIS_URL = os.getenv("REDIS_URL")
NOTIFY_CHANNEL = os.getenv("NOTIFY_CHANNEL", "inventory")
