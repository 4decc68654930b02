"""run_atlas: offline per-country and per-city distance breakdown for GPS routes."""

from .cache import GeoCache, JsonFileStorage, MemoryStorage
from .geocoding import LocalGeocoder, NetworkGeocoder, normalize_country
from .models import GeocodeResult, Route, RunDiagnostics, Snapshot
from .services import StatsAggregator, StatsRunner

__all__ = [
    "GeoCache",
    "GeocodeResult",
    "JsonFileStorage",
    "LocalGeocoder",
    "MemoryStorage",
    "NetworkGeocoder",
    "Route",
    "RunDiagnostics",
    "Snapshot",
    "StatsAggregator",
    "StatsRunner",
    "normalize_country",
]
