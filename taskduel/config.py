"""
Runtime configuration read from environment variables.
Values are resolved once at import time and never mutated afterwards.
"""
import os

from taskduel.constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_LOG_DIRECTORY_PROD,
    DEFAULT_LOG_FILE,
    DEFAULT_SWEEP_INTERVAL_MINUTES,
    CORS_ALLOWED_ORIGINS,
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


DATABASE_URL = os.getenv("TASKDUEL_DATABASE_URL", DEFAULT_DATABASE_URL)

# In production keep the key in an environment variable or a secret store
API_KEY = os.getenv("TASKDUEL_API_KEY", "your-secret-key-change-me")

LOG_DIR = os.getenv("TASKDUEL_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("TASKDUEL_LOG_FILE", DEFAULT_LOG_FILE)

SCHEDULER_ENABLED = _env_bool("TASKDUEL_SCHEDULER_ENABLED", True)
SWEEP_INTERVAL_MINUTES = max(1, _env_int("TASKDUEL_SWEEP_INTERVAL_MINUTES", DEFAULT_SWEEP_INTERVAL_MINUTES))

_cors = os.getenv("TASKDUEL_CORS_ORIGINS")
CORS_ORIGINS = [o.strip() for o in _cors.split(",") if o.strip()] if _cors else CORS_ALLOWED_ORIGINS
