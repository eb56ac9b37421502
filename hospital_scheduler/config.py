"""Configuration for the hospital appointment scheduler.

All tunables centralized here - override through environment variables
(or a .env file) without touching code.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _env_bool("LOG_JSON", True)

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///hospital.db")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
API_VERSION = "1.0.0"

# CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        ",".join(filter(None, [FRONTEND_URL, "http://localhost:5173", "http://localhost:3000"])),
    ).split(",")
    if origin.strip()
]

# Daily reset sweep (cron at 00:00 UTC)
SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)
RESET_TIMEZONE = "UTC"
DAILY_RESET_HOUR = int(os.getenv("DAILY_RESET_HOUR", "0"))
DAILY_RESET_MINUTE = int(os.getenv("DAILY_RESET_MINUTE", "0"))

# Allocation
# Give back the slot claimed by a request that lost the race for it.
RELEASE_SLOT_ON_RACE = _env_bool("RELEASE_SLOT_ON_RACE", True)

# Validation limits
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DOCTOR_ID_MAX_LENGTH = 50
MIN_DAILY_PATIENTS = 1
MAX_DAILY_PATIENTS = 100

# Appointment listing
DEFAULT_APPOINTMENT_LIMIT = 50
MAX_APPOINTMENT_LIMIT = 500
