from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Optional, Sequence, Tuple

from .geometry.distance import route_distance_km
from .geometry.models import LatLon

Tally = Tuple[Tuple[str, float], ...]


@dataclass
class Route:
    id: str
    coordinates: Sequence[LatLon] = ()
    timestamp: Optional[datetime] = None
    category: str = "other"
    duration_s: float = 0.0

    def __post_init__(self) -> None:
        self.coordinates = tuple(
            (float(lat), float(lon)) for lat, lon in self.coordinates
        )

    # Computed once per instance; aggregation reads it several times.
    @cached_property
    def distance_km(self) -> float:
        return route_distance_km(self.coordinates)


@dataclass(frozen=True)
class GeocodeResult:
    country: str
    city: str
    confidence: float


@dataclass
class RunDiagnostics:
    routes_received: int = 0
    discarded_too_short: int = 0
    discarded_invalid_distance: int = 0
    skipped_invalid_coordinate: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    lookup_failures: int = 0
    corrupted_maps: int = 0
    renormalized_entries: int = 0
    orphans_removed: int = 0


@dataclass(frozen=True)
class Snapshot:
    total_km: float
    countries: Tally
    cities: Tally
    processed: int
    total: int
    unique_coords: int
    geocoded_count: int
    done: bool
    generation: int = 0
    diagnostics: Optional[RunDiagnostics] = field(default=None, compare=False)
