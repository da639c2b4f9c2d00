"""Core paths and time helpers shared across the package."""

from .config import APP_NAME, DATA_DIR, DATA_STORE_FILE, LOG_FILE, MEMORY_FILE
from .timeutil import isoformat, parse_datetime, utc_now

__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "DATA_STORE_FILE",
    "LOG_FILE",
    "MEMORY_FILE",
    "isoformat",
    "parse_datetime",
    "utc_now",
]
