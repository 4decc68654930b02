"""Per-country / per-city distance aggregation.

``StatsAggregator.run`` is a generator: it owns every piece of mutable state
for one run (tallies, cache maps, counters) and hands the caller frozen
:class:`~run_atlas.models.Snapshot` values. Nothing is shared between runs
except what the injected storage persists.

Geocoding goes through a :class:`~run_atlas.geocoding.base.GeocodeProvider`.
Providers with ``max_concurrency > 1`` (the network fallback) get their cache
misses resolved on a bounded thread pool; tallying always happens afterwards
on the calling thread, in input order.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..cache import CacheStorage, GeoCache, quantize_key
from ..config import (
    SAMPLE_DEDUP_TOLERANCE_DEG,
    SAMPLE_MAX_POINTS,
    SNAPSHOT_EVERY_ROUTES,
    UNKNOWN_COUNTRY_LABEL,
    UNKNOWN_REMAINDER_EPSILON_KM,
)
from ..errors import GeocodeError, InvalidCoordinate, InvalidDistance
from ..geocoding import UNKNOWN, GeocodeProvider, LocalGeocoder, normalize_country
from ..geometry import checked_distance_km, sample_route, validate_coordinate
from ..geometry.models import LatLon, SampledRoute
from ..models import Route, RunDiagnostics, Snapshot, Tally


def _sorted_tally(tally: Dict[str, float]) -> Tally:
    # Stable sort keeps insertion order for equal distances.
    return tuple(sorted(tally.items(), key=lambda kv: kv[1], reverse=True))


@dataclass
class _RunState:
    total_km: float
    total: int
    countries: Dict[str, float] = field(default_factory=dict)
    cities: Dict[str, float] = field(default_factory=dict)
    seen_keys: Set[str] = field(default_factory=set)
    failed_keys: Set[str] = field(default_factory=set)
    processed: int = 0
    geocoded_count: int = 0
    diagnostics: RunDiagnostics = field(default_factory=RunDiagnostics)

    def snapshot(self, *, done: bool) -> Snapshot:
        return Snapshot(
            total_km=self.total_km,
            countries=_sorted_tally(self.countries),
            cities=_sorted_tally(self.cities),
            processed=self.processed,
            total=self.total,
            unique_coords=len(self.seen_keys),
            geocoded_count=self.geocoded_count,
            done=done,
            diagnostics=self.diagnostics if done else None,
        )


class StatsAggregator:
    """Turns a route collection into a stream of distance breakdown snapshots."""

    def __init__(
        self,
        storage: CacheStorage,
        provider: GeocodeProvider | None = None,
        *,
        snapshot_every: int = SNAPSHOT_EVERY_ROUTES,
        max_samples: int = SAMPLE_MAX_POINTS,
        tolerance_deg: float = SAMPLE_DEDUP_TOLERANCE_DEG,
    ) -> None:
        if snapshot_every < 1:
            raise ValueError("snapshot_every must be >= 1")
        self._storage = storage
        self.provider = provider or LocalGeocoder()
        self._snapshot_every = snapshot_every
        self._max_samples = max_samples
        self._tolerance_deg = tolerance_deg
        self._log = logging.getLogger(self.__class__.__name__)

    def run(
        self,
        routes: Iterable[Route],
        cancel_event: threading.Event | None = None,
    ) -> Iterator[Snapshot]:
        """Yield progress snapshots, ending with exactly one ``done=True`` value.

        When ``cancel_event`` becomes set the generator returns without
        yielding anything further and without saving the cache.
        """

        diagnostics = RunDiagnostics()
        valid = self._validate(list(routes), diagnostics)
        state = _RunState(
            total_km=sum(route.distance_km for route in valid),
            total=len(valid),
            diagnostics=diagnostics,
        )
        if not valid:
            self._log.info(
                "No usable routes (received=%d); nothing to aggregate",
                diagnostics.routes_received,
            )
            yield state.snapshot(done=True)
            return

        cache = GeoCache(self._storage)
        cache.load()
        cleanup = cache.cleanup()
        diagnostics.corrupted_maps = cache.corrupted_maps
        diagnostics.renormalized_entries = cleanup.renormalized
        diagnostics.orphans_removed = cleanup.orphans_removed

        self._log.info(
            "Aggregating %d routes (%.3f km) with %s; %d cached coordinates",
            state.total,
            state.total_km,
            self.provider.name,
            len(cache),
        )

        for start in range(0, len(valid), self._snapshot_every):
            if _cancelled(cancel_event):
                self._log.info("Run cancelled after %d routes", state.processed)
                return
            batch = valid[start : start + self._snapshot_every]
            sampled = [self._sample(route, diagnostics) for route in batch]
            fresh = self._resolve_misses(cache, sampled, state, cancel_event)
            if _cancelled(cancel_event):
                self._log.info("Run cancelled after %d routes", state.processed)
                return
            for samples in sampled:
                if samples is not None:
                    self._tally(cache, samples, state, fresh)
                state.processed += 1
            if state.processed < state.total:
                yield state.snapshot(done=False)

        self._close_unknown(state)
        if _cancelled(cancel_event):
            self._log.info("Run cancelled before saving the cache")
            return
        cache.save()
        self._log.info(
            "Finished: %d routes, %d unique coordinates, %d newly geocoded",
            state.processed,
            len(state.seen_keys),
            state.geocoded_count,
        )
        self._log.debug("Diagnostics: %s", diagnostics)
        yield state.snapshot(done=True)

    def _validate(
        self, routes: Sequence[Route], diagnostics: RunDiagnostics
    ) -> List[Route]:
        diagnostics.routes_received = len(routes)
        valid: List[Route] = []
        for route in routes:
            if len(route.coordinates) < 2:
                diagnostics.discarded_too_short += 1
                self._log.debug("Discarding route %s: fewer than 2 points", route.id)
                continue
            try:
                checked_distance_km(route.distance_km)
            except InvalidDistance as exc:
                diagnostics.discarded_invalid_distance += 1
                self._log.warning("Discarding route %s: %s", route.id, exc)
                continue
            valid.append(route)
        discarded = len(routes) - len(valid)
        if discarded:
            self._log.warning(
                "Discarded %d of %d routes (too short=%d, invalid distance=%d)",
                discarded,
                len(routes),
                diagnostics.discarded_too_short,
                diagnostics.discarded_invalid_distance,
            )
        return valid

    def _sample(
        self, route: Route, diagnostics: RunDiagnostics
    ) -> Optional[Tuple[SampledRoute, List[str]]]:
        try:
            for lat, lon in route.coordinates:
                validate_coordinate(lat, lon)
        except InvalidCoordinate as exc:
            diagnostics.skipped_invalid_coordinate += 1
            self._log.warning("Skipping route %s: %s", route.id, exc)
            return None
        samples = sample_route(
            route.coordinates,
            route.distance_km,
            max_samples=self._max_samples,
            tolerance_deg=self._tolerance_deg,
        )
        keys = [quantize_key(lat, lon) for lat, lon in samples.points]
        return samples, keys

    def _resolve_misses(
        self,
        cache: GeoCache,
        sampled: Sequence[Optional[Tuple[SampledRoute, List[str]]]],
        state: _RunState,
        cancel_event: threading.Event | None,
    ) -> Set[str]:
        """Geocode every key of the batch missing from the cache.

        Returns the keys written to the cache by this call.
        """

        pending: Dict[str, LatLon] = {}
        for entry in sampled:
            if entry is None:
                continue
            samples, keys = entry
            for point, key in zip(samples.points, keys):
                if key in cache or key in pending or key in state.failed_keys:
                    continue
                pending[key] = point
        if not pending:
            return set()

        state.diagnostics.cache_misses += len(pending)
        if self.provider.max_concurrency <= 1:
            fresh: Set[str] = set()
            for key, point in pending.items():
                if _cancelled(cancel_event):
                    break
                if self._lookup(cache, key, point, state):
                    fresh.add(key)
            return fresh
        return self._resolve_concurrently(cache, pending, state, cancel_event)

    def _resolve_concurrently(
        self,
        cache: GeoCache,
        pending: Dict[str, LatLon],
        state: _RunState,
        cancel_event: threading.Event | None,
    ) -> Set[str]:
        fresh: Set[str] = set()
        write_lock = threading.Lock()
        items = list(pending.items())
        workers = max(1, min(self.provider.max_concurrency, len(items)))

        def lookup(key: str, point: LatLon) -> None:
            if _cancelled(cancel_event):
                return
            if self._lookup(cache, key, point, state, write_lock):
                with write_lock:
                    fresh.add(key)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(lookup, key, point): key for key, point in items
            }
            for future in as_completed(futures):
                try:
                    future.result()
                except Exception as exc:  # pragma: no cover - defensive logging
                    key = futures[future]
                    with write_lock:
                        state.failed_keys.add(key)
                        state.diagnostics.lookup_failures += 1
                    self._log.error(
                        "Lookup for %s failed unexpectedly: %s",
                        key,
                        exc,
                        exc_info=True,
                    )
        return fresh

    def _lookup(
        self,
        cache: GeoCache,
        key: str,
        point: LatLon,
        state: _RunState,
        write_lock: threading.Lock | None = None,
    ) -> bool:
        lat, lon = point
        try:
            result = self.provider.geocode(lat, lon)
        except GeocodeError as exc:
            kind = getattr(exc, "kind", "error")
            self._log.warning("Geocode of %s failed (%s): %s", key, kind, exc)
            if write_lock is None:
                state.failed_keys.add(key)
                state.diagnostics.lookup_failures += 1
            else:
                with write_lock:
                    state.failed_keys.add(key)
                    state.diagnostics.lookup_failures += 1
            return False
        country = normalize_country(result.country)
        self._log.debug(
            "Geocoded %s -> %s / %s (confidence %.2f)",
            key,
            country,
            result.city,
            result.confidence,
        )
        if write_lock is None:
            cache.put(key, country, result.city)
            state.geocoded_count += 1
        else:
            with write_lock:
                cache.put(key, country, result.city)
                state.geocoded_count += 1
        return True

    def _tally(
        self,
        cache: GeoCache,
        entry: Tuple[SampledRoute, List[str]],
        state: _RunState,
        fresh: Set[str],
    ) -> None:
        samples, keys = entry
        for key in keys:
            state.seen_keys.add(key)
            if key in fresh:
                # First use of a key geocoded in this batch is the miss itself.
                fresh.discard(key)
            elif key in cache:
                state.diagnostics.cache_hits += 1
            hit = cache.get(key)
            if hit is None:
                continue
            country, city = hit
            # Unknown countries are folded into the remainder bucket on close.
            if country != UNKNOWN:
                state.countries[country] = (
                    state.countries.get(country, 0.0) + samples.share_km
                )
            state.cities[city] = state.cities.get(city, 0.0) + samples.share_km

    @staticmethod
    def _close_unknown(state: _RunState) -> None:
        known = sum(state.countries.values())
        remainder = state.total_km - known
        if remainder > UNKNOWN_REMAINDER_EPSILON_KM:
            state.countries[UNKNOWN_COUNTRY_LABEL] = (
                state.countries.get(UNKNOWN_COUNTRY_LABEL, 0.0) + remainder
            )


def _cancelled(cancel_event: threading.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


__all__ = ["StatsAggregator"]
