"""Environment-driven settings for the location tracker service."""

from __future__ import annotations

import os

from .errors import ConfigurationError

DEFAULT_SQLITE_PATH = "sqlite:///./tracker.db"

DATABASE_URL = os.environ.get("DATABASE_URL", DEFAULT_SQLITE_PATH)
CLEANUP_SECRET = os.getenv("CLEANUP_SECRET") or None
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_MEDIA_LENGTH_RAW = os.getenv("MAX_MEDIA_LENGTH")
# Length of the base64 text, 0 disables the check.
MAX_MEDIA_LENGTH = int(MAX_MEDIA_LENGTH_RAW) if MAX_MEDIA_LENGTH_RAW and MAX_MEDIA_LENGTH_RAW.isdigit() else 0

DEFAULT_UPDATES_LIMIT_RAW = os.getenv("DEFAULT_UPDATES_LIMIT")
DEFAULT_UPDATES_LIMIT = (
    int(DEFAULT_UPDATES_LIMIT_RAW) if DEFAULT_UPDATES_LIMIT_RAW and DEFAULT_UPDATES_LIMIT_RAW.isdigit() else 100
)


def require_cleanup_secret() -> str:
    """Return the operator secret guarding the expiration sweep."""
    if not CLEANUP_SECRET:
        raise ConfigurationError("CLEANUP_SECRET is not configured.")
    return CLEANUP_SECRET
