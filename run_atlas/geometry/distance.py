"""Great-circle distance helpers and coordinate validation."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from ..errors import InvalidCoordinate, InvalidDistance
from .models import LatLon

EARTH_RADIUS_KM = 6371.0


def haversine_km(first: LatLon, second: LatLon) -> float:
    """Return the haversine distance between two (lat, lon) pairs in km."""

    lat1, lon1 = first
    lat2, lon2 = second
    sin = math.sin
    cos = math.cos
    radians = math.radians
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    # Rounding can push ``a`` a hair past 1 for antipodal points.
    a = min(max(a, 0.0), 1.0)
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


def haversine_m(first: LatLon, second: LatLon) -> float:
    """Return the haversine distance between two (lat, lon) pairs in metres."""

    return haversine_km(first, second) * 1000.0


def pairwise_distances_km(points: Sequence[LatLon]) -> NDArray[np.float64]:
    """Return the distances between consecutive points (length ``n - 1``)."""

    if len(points) < 2:
        return np.zeros(0, dtype=float)
    coords = np.radians(np.asarray(points, dtype=float))
    lat = coords[:, 0]
    lon = coords[:, 1]
    delta_lat = np.diff(lat)
    delta_lon = np.diff(lon)
    a = (
        np.sin(delta_lat / 2.0) ** 2
        + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(delta_lon / 2.0) ** 2
    )
    a = np.clip(a, 0.0, 1.0)
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


def route_distance_km(points: Sequence[LatLon]) -> float:
    """Sum of consecutive haversine distances; ``0.0`` for fewer than 2 points.

    Non-finite inputs propagate as ``nan`` so callers can reject the route
    through :func:`checked_distance_km`.
    """

    if len(points) < 2:
        return 0.0
    with np.errstate(invalid="ignore"):
        return float(np.sum(pairwise_distances_km(points)))


def checked_distance_km(value: float) -> float:
    """Return ``value`` unchanged or raise :class:`InvalidDistance`."""

    if not math.isfinite(value) or value < 0:
        raise InvalidDistance(value)
    return value


def is_valid_coordinate(lat: float, lon: float) -> bool:
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0


def validate_coordinate(lat: float, lon: float) -> LatLon:
    """Return the coordinate as floats or raise :class:`InvalidCoordinate`."""

    if not is_valid_coordinate(lat, lon):
        raise InvalidCoordinate(lat, lon)
    return float(lat), float(lon)


__all__ = [
    "EARTH_RADIUS_KM",
    "haversine_km",
    "haversine_m",
    "pairwise_distances_km",
    "route_distance_km",
    "checked_distance_km",
    "is_valid_coordinate",
    "validate_coordinate",
]
