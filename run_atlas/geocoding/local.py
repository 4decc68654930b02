"""Offline geocoder backed by the compiled country/city table."""

from __future__ import annotations

import logging
import math
from typing import Sequence, Tuple

from ..config import CITY_NEAR_KM, CITY_REACH_KM, REGION_REACH_KM
from ..geometry.distance import haversine_km
from ..models import GeocodeResult
from .base import UNKNOWN, GeocodeProvider
from .database import COUNTRIES, CityMarker, CountryRegion, find_country
from .normalization import normalize_country

_LOG = logging.getLogger(__name__)


def closest_city(
    lat: float, lon: float, cities: Sequence[CityMarker]
) -> Tuple[str, float]:
    """Return ``(name, km)`` of the nearest marker; ``inf`` when there is none."""

    if not cities:
        return UNKNOWN, math.inf
    best = cities[0]
    best_km = haversine_km((lat, lon), best.coordinate)
    for city in cities[1:]:
        km = haversine_km((lat, lon), city.coordinate)
        if km < best_km:
            best = city
            best_km = km
    return best.name, best_km


class LocalGeocoder(GeocodeProvider):
    """Bounding-box country lookup plus nearest-city confidence tiers."""

    def __init__(self, countries: Tuple[CountryRegion, ...] = COUNTRIES) -> None:
        self._countries = countries

    def geocode(self, lat: float, lon: float) -> GeocodeResult:
        country = find_country(lat, lon, self._countries)
        if country is None:
            _LOG.debug("No country box contains lat=%s lon=%s", lat, lon)
            return GeocodeResult(country=UNKNOWN, city=UNKNOWN, confidence=0.0)

        label = normalize_country(country.name)
        city_name, distance_km = closest_city(lat, lon, country.cities)
        if distance_km <= CITY_NEAR_KM:
            city, confidence = city_name, 0.95
        elif distance_km <= CITY_REACH_KM:
            city, confidence = city_name, 0.80
        elif distance_km <= REGION_REACH_KM:
            city, confidence = f"Rural {label}", 0.70
        else:
            city, confidence = f"Other {label}", 0.60
        return GeocodeResult(
            country=label,
            city=city,
            confidence=confidence,
        )


__all__ = ["LocalGeocoder", "closest_city"]
