"""Coordinate to (country, city) resolution."""

from .base import GeocodeProvider, UNKNOWN
from .database import COUNTRIES, BoundingBox, CityMarker, CountryRegion, find_country
from .local import LocalGeocoder
from .network import NetworkGeocoder
from .normalization import normalize_country

__all__ = [
    "GeocodeProvider",
    "UNKNOWN",
    "COUNTRIES",
    "BoundingBox",
    "CityMarker",
    "CountryRegion",
    "find_country",
    "LocalGeocoder",
    "NetworkGeocoder",
    "normalize_country",
]
