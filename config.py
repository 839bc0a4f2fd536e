"""Configuration for the ASL league backend."""
from __future__ import annotations

import os
from datetime import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_kickoff(value: str) -> time:
    """Parse HH:MM; fall back to 19:00 on anything malformed."""
    try:
        hours, minutes = value.strip().split(":", 1)
        return time(int(hours), int(minutes))
    except ValueError:
        return time(19, 0)


# Database (key/value store backend)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'asl.db'}",
)

# Total characters (keys + values) the store may hold. 0 disables the check.
STORE_QUOTA = int(os.getenv("STORE_QUOTA", str(5 * 1024 * 1024)))

# Fixtures
FIXTURE_SPACING_DAYS = int(os.getenv("FIXTURE_SPACING_DAYS", "3"))
DEFAULT_KICKOFF = _parse_kickoff(os.getenv("DEFAULT_KICKOFF", "19:00"))

# Live matches: assign a random 0-89 minute to goals recorded without one
RANDOM_GOAL_MINUTE = _parse_bool(os.getenv("RANDOM_GOAL_MINUTE", "false"))

# News feed stories
STORY_EXPIRY_HOURS = int(os.getenv("STORY_EXPIRY_HOURS", "24"))

# Web auth (single admin flag, JWT for the API)
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-long-random-string")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = 7

# API server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
API_RELOAD = _parse_bool(os.getenv("API_RELOAD", "false"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
