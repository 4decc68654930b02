"""Central configuration for the run_atlas distance breakdown tool.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Most settings can be overridden through environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


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
# Input/Output
# ---------------------------------------------------------------------------
# Persistent geocode cache (JSON document holding both coordinate maps).
GEO_CACHE_FILE = os.getenv("RUN_ATLAS_GEO_CACHE_FILE", "geo_cache.json")

# Storage keys used inside the cache document.
COUNTRY_CACHE_KEY = "coordCountryCache"
CITY_CACHE_KEY = "coordCityCache"


# ---------------------------------------------------------------------------
# Route cleaning
# ---------------------------------------------------------------------------
# Split raw traces wherever two consecutive points are further apart than this.
SEGMENT_MAX_GAP_M = _env_float("RUN_ATLAS_SEGMENT_MAX_GAP_M", 20.0)

# Apply gap segmentation to loaded routes before aggregation (CLI only).
ROUTE_SEGMENTATION_ENABLED = _env_bool("RUN_ATLAS_ROUTE_SEGMENTATION", True)

# Maximum representative points geocoded per route.
SAMPLE_MAX_POINTS = _env_int("RUN_ATLAS_SAMPLE_MAX_POINTS", 10)

# Closing point is appended only when it moved more than this (degrees).
SAMPLE_DEDUP_TOLERANCE_DEG = 0.0001


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------
# Publish a partial snapshot after this many processed routes.
SNAPSHOT_EVERY_ROUTES = _env_int("RUN_ATLAS_SNAPSHOT_EVERY", 5)

# Cache keys round coordinates to this many decimals (~111 m at 3).
CACHE_KEY_DECIMALS = 3

# Remainders smaller than this (km) are float noise, not an unknown bucket.
UNKNOWN_REMAINDER_EPSILON_KM = 1e-9

# Label used for distance that could not be attributed to a country.
UNKNOWN_COUNTRY_LABEL = "(Unknown)"


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------
# "local" (compiled-in database) or "network" (reverse geocoding fallback).
GEOCODER_BACKEND = os.getenv("RUN_ATLAS_GEOCODER", "local").strip().lower()

# Confidence tiers (km) for nearest-city resolution.
CITY_NEAR_KM = 10.0
CITY_REACH_KM = 25.0
REGION_REACH_KM = 50.0

# Nominatim-compatible reverse geocoding endpoint for the network fallback.
NETWORK_GEOCODER_URL = os.getenv(
    "RUN_ATLAS_NETWORK_GEOCODER_URL",
    "https://nominatim.openstreetmap.org/reverse",
)
NETWORK_GEOCODER_USER_AGENT = os.getenv(
    "RUN_ATLAS_USER_AGENT", "run-atlas/0.1 (offline distance stats)"
)

# Cap on simultaneously outstanding reverse geocoding lookups.
NETWORK_MAX_CONCURRENT_LOOKUPS = _env_int("RUN_ATLAS_NETWORK_MAX_CONCURRENT", 50)

# Remember "no result" answers for this long so repeated points are not re-sent.
NETWORK_NO_RESULT_TTL_SECONDS = _env_int("RUN_ATLAS_NO_RESULT_TTL", 600)
NETWORK_NO_RESULT_CACHE_SIZE = _env_int("RUN_ATLAS_NO_RESULT_CACHE_SIZE", 1024)


# ---------------------------------------------------------------------------
# HTTP / rate limiting (network fallback only)
# ---------------------------------------------------------------------------
# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 20
HTTP_POOL_MAXSIZE = NETWORK_MAX_CONCURRENT_LOOKUPS

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("RUN_ATLAS_REQUEST_TIMEOUT", 15)

# RATE_LIMIT_JITTER_RANGE adds random delay (seconds) to smooth bursts.
RATE_LIMIT_JITTER_RANGE = (0.0, 0.05)
# RATE_LIMIT_THROTTLE_SECONDS is the pause applied after a 429.
RATE_LIMIT_THROTTLE_SECONDS = _env_int("RUN_ATLAS_THROTTLE_SECONDS", 15)


# ---------------------------------------------------------------------------
# Excel formatting
# ---------------------------------------------------------------------------
# Automatically size columns after writing each sheet (openpyxl only).
EXCEL_AUTOSIZE_COLUMNS = True
EXCEL_AUTOSIZE_MAX_WIDTH = 50  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = 5000  # skip autosize for very large sheets
