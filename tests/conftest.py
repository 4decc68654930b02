"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable routes, storages and
geocode providers for aggregation tests.
"""
from __future__ import annotations

import os
import sys
import threading

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from run_atlas.cache import MemoryStorage
from run_atlas.geocoding import GeocodeProvider, LocalGeocoder
from run_atlas.models import Route

BERLIN = (52.5200, 13.4050)


# --- Factory helpers -------------------------------------------------
def _make_route(route_id, *points, category="run"):
    return Route(id=route_id, coordinates=list(points), category=category)


def _berlin_route(route_id="berlin"):
    # Second point sits ~70 m north of the Berlin marker.
    lat, lon = BERLIN
    return _make_route(route_id, (lat, lon), (lat + 0.00063, lon))


class CountingGeocoder(GeocodeProvider):
    """Wraps the offline geocoder and records every lookup."""

    def __init__(self, max_concurrency=1):
        self._inner = LocalGeocoder()
        self.max_concurrency = max_concurrency
        self.calls = []
        self._lock = threading.Lock()

    def geocode(self, lat, lon):
        with self._lock:
            self.calls.append((lat, lon))
        return self._inner.geocode(lat, lon)


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def make_route():
    return _make_route


@pytest.fixture
def berlin_route():
    return _berlin_route


@pytest.fixture
def counting_geocoder():
    def _factory(max_concurrency=1):
        return CountingGeocoder(max_concurrency=max_concurrency)

    return _factory
