"""Dataclasses describing GPS geometry inputs and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


LatLon = Tuple[float, float]


@dataclass(slots=True)
class SampledRoute:
    """Representative points of a route with an equal distance share each."""

    points: List[LatLon] = field(default_factory=list)
    share_km: float = 0.0

    @property
    def total_km(self) -> float:
        return self.share_km * len(self.points)
