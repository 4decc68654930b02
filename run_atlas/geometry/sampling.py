"""Reduce a route to a bounded set of representative points."""

from __future__ import annotations

from typing import List, Sequence

from .models import LatLon, SampledRoute

DEFAULT_MAX_SAMPLES = 10
DEFAULT_TOLERANCE_DEG = 0.0001


def sample_points(
    points: Sequence[LatLon],
    max_samples: int = DEFAULT_MAX_SAMPLES,
    tolerance_deg: float = DEFAULT_TOLERANCE_DEG,
) -> List[LatLon]:
    """Return at most ``max_samples`` points spread evenly by index.

    Short traces are returned as-is. Longer ones keep every ``stride``-th
    point and close with the final point unless it sits within
    ``tolerance_deg`` of the last kept sample on both axes.
    """

    if max_samples < 2:
        raise ValueError("max_samples must be at least 2")
    count = len(points)
    if count <= max_samples:
        return list(points)
    stride = max(1.0, count / max_samples)
    # One slot stays free for the closing point.
    sampled = [points[int(i * stride)] for i in range(max_samples - 1)]
    last = points[-1]
    tail = sampled[-1]
    if abs(last[0] - tail[0]) > tolerance_deg or abs(last[1] - tail[1]) > tolerance_deg:
        sampled.append(last)
    return sampled


def sample_route(
    points: Sequence[LatLon],
    total_km: float,
    max_samples: int = DEFAULT_MAX_SAMPLES,
    tolerance_deg: float = DEFAULT_TOLERANCE_DEG,
) -> SampledRoute:
    """Sample ``points`` and give each sample an equal share of ``total_km``.

    The share ignores the real spacing between samples: a route straddling a
    border is split by sample count, not by the kilometres on either side.
    """

    sampled = sample_points(points, max_samples, tolerance_deg)
    if not sampled:
        return SampledRoute(points=[], share_km=0.0)
    return SampledRoute(points=sampled, share_km=total_km / len(sampled))


__all__ = [
    "DEFAULT_MAX_SAMPLES",
    "DEFAULT_TOLERANCE_DEG",
    "sample_points",
    "sample_route",
]
