# Life Tracker Config
# Central configuration read from the environment

from __future__ import annotations

import logging
import os
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOG_FORMAT = "[%(asctime)s] <%(module)s> %(levelname)s:  %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

DEFAULT_DATABASE_URL = "sqlite:///tracker.db"

SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-key-change-me")
DATABASE_URL = os.environ.get("TRACKER_DATABASE_URL")

# Hosted backend (PostgREST style); both must be set to use it
BACKEND_URL = os.environ.get("TRACKER_BACKEND_URL")
BACKEND_KEY = os.environ.get("TRACKER_BACKEND_KEY")

TIMEZONE = os.environ.get("TRACKER_TIMEZONE")
LOG_LEVEL = os.environ.get("TRACKER_LOG_LEVEL", "INFO")


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return the named zone, or None to use the server's local zone."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logging.getLogger(__name__).warning("Unknown timezone %r, using local time", name)
        return None


def setup_logging(level: str | int | None = None) -> None:
    """Configure the root logger once for the CLI and the dev server."""
    level = level or LOG_LEVEL
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Invalid logging level: {level}")
        level = numeric
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger().setLevel(level)
