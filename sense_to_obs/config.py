"""Central configuration for the senseBox to OpenBikeSensor exporter.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from .errors import ConfigurationError


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


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


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# OpenBikeSensor portal
# ---------------------------------------------------------------------------
# Portal base URL, e.g. https://portal.openbikesensor.org. Required for uploads.
OBS_HOST = os.getenv("OBS_HOST", "").rstrip("/")

# Per-user API key shown in the portal settings. Required for uploads.
OBS_API_KEY = os.getenv("OBS_API_KEY", "")

OBS_UPLOAD_PATH = "/api/tracks"
OBS_USER_AGENT = "OBS/SenseBoxToOBS"
OBS_TRACK_DESCRIPTION = "Uploaded with OpenBikeSensor SenseBoxToOBS"


# ---------------------------------------------------------------------------
# openSenseMap
# ---------------------------------------------------------------------------
OPENSENSEMAP_BASE_URL = os.getenv(
    "OPENSENSEMAP_BASE_URL", "https://api.opensensemap.org"
).rstrip("/")

# Boxes are discovered by phenomenon and group tag.
BOX_GROUP_TAGS = os.getenv("BOX_GROUP_TAGS", "wiesbaden,bike")
DISTANCE_PHENOMENON = "Overtaking Distance"
SPEED_PHENOMENON = "Speed"

# Process only this box and skip discovery (useful for debugging).
DEBUG_BOX_ID = os.getenv("DEBUG_BOX_ID") or None


# ---------------------------------------------------------------------------
# Trip reconstruction
# ---------------------------------------------------------------------------
# Consecutive readings further apart than this start a new trip.
TRIP_GAP_THRESHOLD_SECONDS = _env_float("TRIP_GAP_THRESHOLD_SECONDS", 3600.0)

# Maximum distance in time between a distance reading and its speed reading.
SPEED_MATCH_TOLERANCE_SECONDS = _env_float("SPEED_MATCH_TOLERANCE_SECONDS", 5.0)

# Readings taken below this speed are never confirmed overtakings.
LOW_SPEED_THRESHOLD_KMH = _env_float("LOW_SPEED_THRESHOLD_KMH", 5.0)


# ---------------------------------------------------------------------------
# Watermarks and fetch window
# ---------------------------------------------------------------------------
# Directory holding one last_update_<box>.txt file per box.
LAST_UPDATE_DIR = os.getenv("LAST_UPDATE_DIR", "last_updates")

# Fetch start used for boxes that were never exported.
WATERMARK_DEFAULT_LOOKBACK_DAYS = _env_int("WATERMARK_DEFAULT_LOOKBACK_DAYS", 365)

# Added to the stored watermark so the boundary reading is not fetched again.
WATERMARK_GUARD_SECONDS = _env_int("WATERMARK_GUARD_SECONDS", 5)

# Fetch window ends at this hour (local time) of the current day so that a
# ride still in progress overnight is not split. Negative disables the cutoff.
FETCH_WINDOW_CUTOFF_HOUR = _env_int("FETCH_WINDOW_CUTOFF_HOUR", 2)

# Timezone used for the cutoff hour and for progress output.
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Europe/Berlin")


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
# Read timeout in seconds for fetches and uploads.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 30)

# Retry/backoff for openSenseMap GETs. Uploads are never retried.
HTTP_MAX_RETRIES = _env_int("HTTP_MAX_RETRIES", 3)
HTTP_BACKOFF_FACTOR = _env_float("HTTP_BACKOFF_FACTOR", 1.0)

# Write every encoded track to OUTPUT_DIR as well (empty disables).
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "")

# Skip uploads and watermark updates.
DRY_RUN = _env_bool("DRY_RUN", False)


def missing_upload_settings() -> list[str]:
    """Return the names of required portal settings that are not configured."""

    missing = []
    if not OBS_HOST:
        missing.append("OBS_HOST")
    if not OBS_API_KEY:
        missing.append("OBS_API_KEY")
    return missing


def require_upload_settings() -> None:
    """Raise ``ConfigurationError`` unless portal host and API key are set."""

    missing = missing_upload_settings()
    if missing:
        raise ConfigurationError(
            "OBS configuration is incomplete (missing: "
            + ", ".join(missing)
            + "). Configure OBS_HOST and OBS_API_KEY to enable uploads."
        )
