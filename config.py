# config.py
import os

# AWS
AWS_REGION = os.environ.get("AWS_REGION", "eu-central-1")
INSTANCE_ID = os.environ.get("INSTANCE_ID", "")
API_TIMEOUT = int(os.environ.get("API_TIMEOUT", "10"))
CONNECT_RETRIES = 3
CONNECT_DELAY = 5

# --- Fail-safe ---
STOP_AFTER_HOURS = float(os.environ.get("STOP_AFTER_HOURS", "4"))
CHECK_INTERVAL_MINUTES = int(os.environ.get("CHECK_INTERVAL_MINUTES", "60"))

# --- Tags ---
TAG_LAST_STARTED = "LastStartedAt"
TAG_DEFER_HOURS = "AutoStopDeferHours"

# --- Notifications (ntfy) ---
NTFY_SERVER = os.environ.get("NTFY_SERVER", "https://ntfy.sh")
NTFY_TOPIC = os.environ.get("NTFY_TOPIC", "")
NOTIFY_TIMEOUT = int(os.environ.get("NOTIFY_TIMEOUT", "10"))

# --- Schedule ---
SCHEDULE_START_TIME = os.environ.get("SCHEDULE_START_TIME", "08:00")
SCHEDULE_STOP_TIME = os.environ.get("SCHEDULE_STOP_TIME", "20:00")
SCHEDULE_DAYS = os.environ.get("SCHEDULE_DAYS", "monday,tuesday,wednesday,thursday,friday")
SCHEDULE_TIMEZONE = os.environ.get("SCHEDULE_TIMEZONE", "Europe/Berlin")

# --- Log path ---
LOG_FILE = os.environ.get("LOG_FILE", "")
