"""Split raw GPS traces into continuous movement segments."""

from __future__ import annotations

from typing import List, Sequence

from .distance import pairwise_distances_km
from .models import LatLon

DEFAULT_MAX_GAP_M = 20.0


def segment_points(
    points: Sequence[LatLon], max_gap_m: float = DEFAULT_MAX_GAP_M
) -> List[List[LatLon]]:
    """Return the maximal runs of ``points`` with no gap above ``max_gap_m``.

    A gap larger than the threshold (GPS pause, tunnel, teleport) closes the
    current segment and starts a new one at the far point. Segments with a
    single point carry no distance and are dropped.
    """

    if max_gap_m <= 0:
        raise ValueError("max_gap_m must be greater than zero")
    if len(points) < 2:
        return []
    gaps_m = pairwise_distances_km(points) * 1000.0
    segments: List[List[LatLon]] = []
    current: List[LatLon] = [points[0]]
    for index, gap in enumerate(gaps_m, start=1):
        # ``not <=`` also breaks on nan gaps from malformed points.
        if not gap <= max_gap_m:
            if len(current) >= 2:
                segments.append(current)
            current = []
        current.append(points[index])
    if len(current) >= 2:
        segments.append(current)
    return segments


__all__ = ["DEFAULT_MAX_GAP_M", "segment_points"]
