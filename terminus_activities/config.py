"""Central configuration for the Terminus activities service.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import os
from datetime import datetime, timezone

from dotenv import load_dotenv


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_epoch(key: str, default: datetime) -> int:
    """Return a Unix timestamp from an ISO date/datetime env var (UTC assumed)."""

    value = os.getenv(key)
    parsed = default
    if value:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            parsed = default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Strava settings
# ---------------------------------------------------------------------------
STRAVA_BASE_URL = os.getenv("STRAVA_BASE_URL", "https://www.strava.com/api/v3")
STRAVA_OAUTH_URL = os.getenv("STRAVA_OAUTH_URL", "https://www.strava.com/oauth/token")
STRAVA_AUTHORIZE_URL = os.getenv(
    "STRAVA_AUTHORIZE_URL", "https://www.strava.com/oauth/authorize"
)

# Client credentials pulled from the environment. Do not hardcode secrets.
CLIENT_ID = os.getenv("STRAVA_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("STRAVA_CLIENT_SECRET", "")
REDIRECT_URI = os.getenv("STRAVA_REDIRECT_URI", "")
OAUTH_SCOPE = os.getenv("OAUTH_SCOPE", "activity:read")

# Long-lived refresh token used by the static export job only.
REFRESH_TOKEN = os.getenv("STRAVA_REFRESH_TOKEN", "")


# ---------------------------------------------------------------------------
# Activity fetch
# ---------------------------------------------------------------------------
# Strava caps per_page at 200.
ACTIVITY_PAGE_SIZE = _env_int("ACTIVITY_PAGE_SIZE", 200)

# Pages requested concurrently per fetch. Activities beyond
# ACTIVITY_MAX_PAGES * ACTIVITY_PAGE_SIZE are not returned; the aggregate
# result is flagged as truncated when the last page comes back full.
ACTIVITY_MAX_PAGES = _env_int("ACTIVITY_MAX_PAGES", 10)

# Earliest activity of interest. The upper bound is always "now".
ACTIVITIES_AFTER = _env_epoch(
    "ACTIVITIES_AFTER", datetime(2025, 3, 22, tzinfo=timezone.utc)
)

# Case-insensitive keyword matched against activity name and description.
ACTIVITY_KEYWORD = os.getenv("ACTIVITY_KEYWORD", "terminus")

# Seconds a user's filtered activity list is served from memory.
ACTIVITY_CACHE_TTL_SECONDS = _env_int("ACTIVITY_CACHE_TTL_SECONDS", 10 * 60)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------
# Request timeout in seconds. Bounds each page fetch since sibling fetches are
# never cancelled.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)

# Connection-level retries on the HTTP adapter. 0 means a single attempt.
STRAVA_MAX_RETRIES = _env_int("STRAVA_MAX_RETRIES", 0)

# HTTP session pool sizes; must cover ACTIVITY_MAX_PAGES concurrent requests.
HTTP_POOL_CONNECTIONS = 20
HTTP_POOL_MAXSIZE = 20


# ---------------------------------------------------------------------------
# Web server
# ---------------------------------------------------------------------------
SERVER_HOST = os.getenv("SERVER_HOST", "localhost")
SERVER_PORT = _env_int("SERVER_PORT", 8080)
SERVER_DEBUG = _env_bool("SERVER_DEBUG", False)

# Directory holding index.html and front-end assets.
STATIC_DIR = os.getenv(
    "STATIC_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")
)

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "user_id")


# ---------------------------------------------------------------------------
# Static export
# ---------------------------------------------------------------------------
EXPORT_OUTPUT_FILE = os.getenv(
    "EXPORT_OUTPUT_FILE", os.path.join(STATIC_DIR, "activities.json")
)
