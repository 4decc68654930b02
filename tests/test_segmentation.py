import random

import pytest

from run_atlas.geometry import haversine_m, segment_points
from run_atlas.models import Route
from run_atlas.route_io import expand_segments, segment_route

BASE = (52.5200, 13.4050)
# ~11 m of latitude per 0.0001 degree
STEP = 0.0001


def _walk(count, start=BASE, step=STEP):
    lat, lon = start
    return [(lat + i * step, lon) for i in range(count)]


def test_single_gap_splits_trace_into_three_point_runs():
    first = _walk(3)
    second = _walk(3, start=(BASE[0] + 0.01, BASE[1]))
    segments = segment_points(first + second, max_gap_m=20.0)
    assert segments == [first, second]


def test_isolated_outlier_is_dropped():
    # Point two sits ~500 m away from its neighbours; every segment has one point.
    points = [BASE, (BASE[0] + 0.0045, BASE[1]), BASE]
    assert segment_points(points, max_gap_m=20.0) == []


def test_short_inputs_have_no_segments():
    assert segment_points([], 20.0) == []
    assert segment_points([BASE], 20.0) == []


def test_threshold_must_be_positive():
    with pytest.raises(ValueError):
        segment_points(_walk(3), max_gap_m=0)


def test_segment_invariants_on_random_trace():
    rng = random.Random(7)
    points = [BASE]
    for _ in range(300):
        lat, lon = points[-1]
        jump = 0.002 if rng.random() < 0.1 else 0.00012
        points.append((lat + rng.uniform(-jump, jump), lon + rng.uniform(-jump, jump)))

    segments = segment_points(points, max_gap_m=20.0)
    flat = [p for segment in segments for p in segment]

    # order is preserved
    positions = [points.index(p) for p in flat]
    assert positions == sorted(positions)
    for segment in segments:
        assert len(segment) >= 2
        for a, b in zip(segment, segment[1:]):
            assert haversine_m(a, b) <= 20.0
    # any large gap in the input never ends up inside a segment
    members = {}
    for idx, segment in enumerate(segments):
        for p in segment:
            members[p] = idx
    for a, b in zip(points, points[1:]):
        if haversine_m(a, b) > 20.0 and a in members and b in members:
            assert members[a] != members[b]


def test_segment_route_keeps_unsplit_route():
    route = Route(id="r", coordinates=_walk(4))
    assert segment_route(route, 20.0) == [route]


def test_segment_route_names_children():
    coords = _walk(3) + _walk(3, start=(BASE[0] + 0.01, BASE[1]))
    route = Route(id="run", coordinates=coords, category="run", duration_s=600.0)
    children = segment_route(route, 20.0)
    assert [c.id for c in children] == ["run#1", "run#2"]
    assert all(c.category == "run" for c in children)
    assert sum(c.duration_s for c in children) == pytest.approx(600.0)


def test_expand_segments_drops_routes_without_segments():
    ok = Route(id="ok", coordinates=_walk(3))
    broken = Route(id="broken", coordinates=[BASE, (BASE[0] + 0.0045, BASE[1]), BASE])
    expanded = expand_segments([ok, broken], 20.0)
    assert [r.id for r in expanded] == ["ok"]
    assert sum(r.distance_km for r in expand_segments([broken], 20.0)) == 0.0
