import dataclasses
import json
import math
import threading

import pytest

from run_atlas.cache import MemoryStorage
from run_atlas.config import CITY_CACHE_KEY, COUNTRY_CACHE_KEY
from run_atlas.errors import GeocodeError, NetworkGeocodeFailure
from run_atlas.geocoding import COUNTRIES, GeocodeProvider, LocalGeocoder
from run_atlas.services import StatsAggregator


def _final(snapshots):
    assert snapshots, "aggregator yielded nothing"
    assert snapshots[-1].done
    assert all(not s.done for s in snapshots[:-1])
    return snapshots[-1]


def _country_sum(snapshot):
    return math.fsum(km for _, km in snapshot.countries)


class FlakyGeocoder(GeocodeProvider):
    """Fails every lookup north of ``fail_above_lat``."""

    def __init__(self, fail_above_lat, max_concurrency=1):
        self._inner = LocalGeocoder()
        self._fail_above = fail_above_lat
        self.max_concurrency = max_concurrency

    def geocode(self, lat, lon):
        if lat > self._fail_above:
            raise NetworkGeocodeFailure(NetworkGeocodeFailure.TIMEOUT, "simulated")
        return self._inner.geocode(lat, lon)


def test_single_berlin_route(storage, berlin_route):
    snapshot = _final(list(StatsAggregator(storage).run([berlin_route()])))
    assert snapshot.total_km == pytest.approx(0.07, abs=1e-3)
    assert [c for c, _ in snapshot.countries] == ["Germany"]
    assert [c for c, _ in snapshot.cities] == ["Berlin"]
    assert snapshot.countries[0][1] == pytest.approx(snapshot.total_km)
    assert snapshot.cities[0][1] == pytest.approx(snapshot.total_km)
    assert (snapshot.processed, snapshot.total) == (1, 1)
    assert snapshot.unique_coords == 2
    assert snapshot.geocoded_count == 2


def test_empty_input_yields_one_done_snapshot(storage):
    snapshots = list(StatsAggregator(storage).run([]))
    assert len(snapshots) == 1
    snapshot = snapshots[0]
    assert snapshot.done
    assert snapshot.total_km == 0
    assert snapshot.countries == ()
    assert snapshot.cities == ()
    assert (snapshot.processed, snapshot.total) == (0, 0)
    assert storage.get(COUNTRY_CACHE_KEY) is None


def test_discarded_routes_are_counted_not_fatal(storage, make_route, berlin_route):
    routes = [
        make_route("lonely", (52.52, 13.405)),
        make_route("nan", (52.52, 13.405), (float("nan"), 13.405)),
        berlin_route(),
    ]
    snapshot = _final(list(StatsAggregator(storage).run(routes)))
    assert snapshot.total == 1
    assert snapshot.diagnostics.routes_received == 3
    assert snapshot.diagnostics.discarded_too_short == 1
    assert snapshot.diagnostics.discarded_invalid_distance == 1


def test_conservation_with_unknown_bucket(storage, make_route, berlin_route):
    routes = [
        berlin_route(),
        make_route("paris", (48.8566, 2.3522), (48.8666, 2.3622)),
        make_route("pacific", (0.0, -150.0), (0.01, -150.0)),
        make_route("bad-lat", (95.0, 13.0), (95.001, 13.0)),
    ]
    snapshot = _final(list(StatsAggregator(storage).run(routes)))
    labels = [c for c, _ in snapshot.countries]
    assert "(Unknown)" in labels
    assert "Unknown" not in labels
    assert _country_sum(snapshot) == pytest.approx(snapshot.total_km, rel=1e-12)
    assert snapshot.diagnostics.skipped_invalid_coordinate == 1
    cities = dict(snapshot.cities)
    assert "Unknown" in cities
    located_km = snapshot.total_km - routes[3].distance_km
    assert math.fsum(cities.values()) == pytest.approx(located_km, rel=1e-12)


def test_no_unknown_bucket_when_everything_resolves(storage, berlin_route):
    routes = [berlin_route(f"r{i}") for i in range(3)]
    snapshot = _final(list(StatsAggregator(storage).run(routes)))
    assert [c for c, _ in snapshot.countries] == ["Germany"]


def test_tallies_sorted_descending(storage, make_route):
    routes = [
        make_route("short-paris", (48.8566, 2.3522), (48.8576, 2.3522)),
        make_route("long-berlin", (52.52, 13.405), (52.56, 13.405)),
    ]
    snapshot = _final(list(StatsAggregator(storage).run(routes)))
    assert [c for c, _ in snapshot.countries] == ["Germany", "France"]
    kms = [km for _, km in snapshot.cities]
    assert kms == sorted(kms, reverse=True)


def test_snapshots_are_monotonic(storage, berlin_route):
    routes = [berlin_route(f"r{i}") for i in range(12)]
    snapshots = list(StatsAggregator(storage, snapshot_every=5).run(routes))
    final = _final(snapshots)
    assert [s.processed for s in snapshots] == [5, 10, 12]
    assert final.processed == final.total == 12
    previous = {}
    for snapshot in snapshots:
        current = dict(snapshot.countries)
        for label, km in previous.items():
            assert current.get(label, 0.0) >= km
        previous = current


def test_partial_snapshots_carry_no_diagnostics(storage, berlin_route):
    routes = [berlin_route(f"r{i}") for i in range(6)]
    snapshots = list(StatsAggregator(storage, snapshot_every=5).run(routes))
    assert snapshots[0].diagnostics is None
    assert snapshots[-1].diagnostics is not None


def test_snapshot_is_frozen(storage, berlin_route):
    snapshot = _final(list(StatsAggregator(storage).run([berlin_route()])))
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.total_km = 1.0


def test_repeated_keys_geocoded_once_per_run(storage, berlin_route, counting_geocoder):
    provider = counting_geocoder()
    routes = [berlin_route("a"), berlin_route("b")]
    snapshot = _final(list(StatsAggregator(storage, provider).run(routes)))
    assert len(provider.calls) == 2
    assert snapshot.unique_coords == 2
    assert snapshot.diagnostics.cache_hits == 2


def test_second_run_is_served_from_cache(storage, berlin_route, counting_geocoder):
    provider = counting_geocoder()
    first = _final(list(StatsAggregator(storage, provider).run([berlin_route()])))
    calls_after_first = len(provider.calls)
    second = _final(list(StatsAggregator(storage, provider).run([berlin_route()])))
    assert len(provider.calls) == calls_after_first
    assert second.geocoded_count == 0
    assert second.countries == first.countries
    assert second.cities == first.cities


def test_cache_saved_after_run(storage, berlin_route):
    _final(list(StatsAggregator(storage).run([berlin_route()])))
    countries = json.loads(storage.get(COUNTRY_CACHE_KEY))
    cities = json.loads(storage.get(CITY_CACHE_KEY))
    assert countries == {"52.520,13.405": "Germany", "52.521,13.405": "Germany"}
    assert set(cities.values()) == {"Berlin"}


def test_legacy_cache_entries_are_cleaned_on_load(berlin_route, counting_geocoder):
    storage = MemoryStorage(
        {
            COUNTRY_CACHE_KEY: json.dumps({"52.520,13.405": "Deutschland"}),
            CITY_CACHE_KEY: json.dumps({"52.520,13.405": "Berlin", "1.000,1.000": "Ghost"}),
        }
    )
    provider = counting_geocoder()
    snapshot = _final(list(StatsAggregator(storage, provider).run([berlin_route()])))
    assert len(provider.calls) == 1
    assert snapshot.diagnostics.renormalized_entries == 1
    assert snapshot.diagnostics.orphans_removed == 1
    assert json.loads(storage.get(COUNTRY_CACHE_KEY))["52.520,13.405"] == "Germany"
    assert "1.000,1.000" not in json.loads(storage.get(CITY_CACHE_KEY))


def test_corrupted_cache_does_not_abort_run(berlin_route):
    storage = MemoryStorage({COUNTRY_CACHE_KEY: "[broken", CITY_CACHE_KEY: "42"})
    snapshot = _final(list(StatsAggregator(storage).run([berlin_route()])))
    assert snapshot.diagnostics.corrupted_maps == 2
    assert [c for c, _ in snapshot.countries] == ["Germany"]


def test_cancel_before_start_yields_nothing(storage, berlin_route):
    cancel = threading.Event()
    cancel.set()
    assert list(StatsAggregator(storage).run([berlin_route()], cancel)) == []
    assert storage.get(COUNTRY_CACHE_KEY) is None


def test_cancel_mid_run_stops_without_saving(storage, berlin_route):
    cancel = threading.Event()
    routes = [berlin_route(f"r{i}") for i in range(12)]
    run = StatsAggregator(storage, snapshot_every=5).run(routes, cancel)
    first = next(run)
    assert first.processed == 5
    cancel.set()
    assert list(run) == []
    assert storage.get(COUNTRY_CACHE_KEY) is None


def test_lookup_failures_leave_points_ungeocoded(storage, berlin_route):
    provider = FlakyGeocoder(fail_above_lat=52.5201)
    snapshot = _final(list(StatsAggregator(storage, provider).run([berlin_route()])))
    countries = dict(snapshot.countries)
    half = snapshot.total_km / 2
    assert countries["Germany"] == pytest.approx(half)
    assert countries["(Unknown)"] == pytest.approx(half)
    assert dict(snapshot.cities) == {"Berlin": pytest.approx(half)}
    assert snapshot.diagnostics.lookup_failures == 1
    assert snapshot.geocoded_count == 1
    assert list(json.loads(storage.get(COUNTRY_CACHE_KEY))) == ["52.520,13.405"]


class DownGeocoder(GeocodeProvider):
    def geocode(self, lat, lon):
        raise GeocodeError("provider down")


def test_base_geocode_errors_are_skipped_sequentially(storage, berlin_route):
    snapshot = _final(list(StatsAggregator(storage, DownGeocoder()).run([berlin_route()])))
    assert snapshot.countries == (("(Unknown)", pytest.approx(snapshot.total_km)),)
    assert snapshot.cities == ()
    assert snapshot.diagnostics.lookup_failures == 2
    assert snapshot.geocoded_count == 0


def test_long_routes_are_sampled(storage, make_route, counting_geocoder):
    provider = counting_geocoder()
    points = [(52.52 + i * 0.002, 13.405) for i in range(60)]
    snapshot = _final(list(StatsAggregator(storage, provider).run([make_route("long", *points)])))
    assert len(provider.calls) <= 10
    assert _country_sum(snapshot) == pytest.approx(snapshot.total_km)


def _world_routes(make_route):
    routes = []
    for country in COUNTRIES:
        for city in country.cities[:3]:
            routes.append(
                make_route(
                    f"{country.code}-{city.name}",
                    (city.lat, city.lon),
                    (city.lat + 0.003, city.lon + 0.003),
                    (city.lat + 0.006, city.lon),
                )
            )
    return routes


def test_concurrent_provider_matches_sequential(make_route, counting_geocoder):
    routes = _world_routes(make_route)
    sequential = counting_geocoder()
    concurrent = counting_geocoder(max_concurrency=8)
    seq = _final(list(StatsAggregator(MemoryStorage(), sequential, snapshot_every=7).run(routes)))
    conc_snapshots = list(
        StatsAggregator(MemoryStorage(), concurrent, snapshot_every=7).run(routes)
    )
    conc = _final(conc_snapshots)
    assert conc.countries == seq.countries
    assert conc.cities == seq.cities
    assert conc.unique_coords == seq.unique_coords
    assert conc.geocoded_count == seq.geocoded_count
    assert sorted(concurrent.calls) == sorted(sequential.calls)
    assert [s.processed for s in conc_snapshots] == sorted(s.processed for s in conc_snapshots)


def test_concurrent_failures_are_isolated(storage, berlin_route):
    provider = FlakyGeocoder(fail_above_lat=52.5201, max_concurrency=4)
    routes = [berlin_route(f"r{i}") for i in range(4)]
    snapshot = _final(list(StatsAggregator(storage, provider).run(routes)))
    assert snapshot.diagnostics.lookup_failures == 1
    assert _country_sum(snapshot) == pytest.approx(snapshot.total_km)


def test_invalid_snapshot_interval():
    with pytest.raises(ValueError):
        StatsAggregator(MemoryStorage(), snapshot_every=0)
