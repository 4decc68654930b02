"""GPS geometry utilities: distances, gap segmentation and point sampling."""

from .models import LatLon, SampledRoute
from .distance import (
    checked_distance_km,
    haversine_km,
    haversine_m,
    is_valid_coordinate,
    pairwise_distances_km,
    route_distance_km,
    validate_coordinate,
)
from .segmentation import segment_points
from .sampling import sample_points, sample_route

__all__ = [
    "LatLon",
    "SampledRoute",
    "checked_distance_km",
    "haversine_km",
    "haversine_m",
    "is_valid_coordinate",
    "pairwise_distances_km",
    "route_distance_km",
    "validate_coordinate",
    "segment_points",
    "sample_points",
    "sample_route",
]
