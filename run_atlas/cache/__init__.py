"""Geocode cache and its storage backends."""

from .geo_cache import CleanupStats, GeoCache, quantize_key
from .storage import CacheStorage, JsonFileStorage, MemoryStorage

__all__ = [
    "CacheStorage",
    "CleanupStats",
    "GeoCache",
    "JsonFileStorage",
    "MemoryStorage",
    "quantize_key",
]
