"""Persistent coordinate to (country, city) cache."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..config import CACHE_KEY_DECIMALS, CITY_CACHE_KEY, COUNTRY_CACHE_KEY
from ..errors import CorruptedCache
from ..geocoding.base import UNKNOWN
from ..geocoding.normalization import normalize_country
from .storage import CacheStorage


def quantize_key(lat: float, lon: float, decimals: int = CACHE_KEY_DECIMALS) -> str:
    """Return the cache key for a coordinate, e.g. ``"52.520,13.405"``.

    Adding ``0.0`` folds ``-0.0`` into ``0.0`` so both sides of the equator
    and the prime meridian share one key at the origin.
    """

    qlat = round(lat, decimals) + 0.0
    qlon = round(lon, decimals) + 0.0
    return f"{qlat:.{decimals}f},{qlon:.{decimals}f}"


@dataclass(frozen=True)
class CleanupStats:
    renormalized: int = 0
    orphans_removed: int = 0


class GeoCache:
    """Two string maps keyed by quantized coordinate, persisted via a storage port.

    Every city key is expected to have a country key; :meth:`cleanup` restores
    that after loading data written by older versions.
    """

    def __init__(self, storage: CacheStorage) -> None:
        self._storage = storage
        self._countries: Dict[str, str] = {}
        self._cities: Dict[str, str] = {}
        self._log = logging.getLogger(self.__class__.__name__)
        self.corrupted_maps = 0

    def load(self) -> None:
        """Replace in-memory state with the persisted maps.

        A map that fails to decode or has the wrong shape is discarded and
        counted in :attr:`corrupted_maps`.
        """

        self.corrupted_maps = 0
        self._countries = self._load_map(COUNTRY_CACHE_KEY)
        self._cities = self._load_map(CITY_CACHE_KEY)
        self._log.debug(
            "Loaded %d country and %d city entries",
            len(self._countries),
            len(self._cities),
        )

    def _load_map(self, key: str) -> Dict[str, str]:
        raw = self._storage.get(key)
        if raw is None:
            return {}
        try:
            return self._decode_map(key, raw)
        except CorruptedCache as exc:
            self.corrupted_maps += 1
            self._log.warning("%s", exc)
            return {}

    @staticmethod
    def _decode_map(key: str, raw: str) -> Dict[str, str]:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CorruptedCache(key, f"undecodable JSON ({exc})") from exc
        if not isinstance(payload, dict):
            raise CorruptedCache(key, f"expected object, got {type(payload).__name__}")
        for entry_key, value in payload.items():
            if not isinstance(value, str):
                raise CorruptedCache(
                    key, f"value for {entry_key!r} is {type(value).__name__}"
                )
        return dict(payload)

    def cleanup(self) -> CleanupStats:
        """Normalize stored country names and drop city entries with no country."""

        renormalized = 0
        for key, country in list(self._countries.items()):
            normalized = normalize_country(country)
            if normalized != country:
                self._countries[key] = normalized
                renormalized += 1
        orphans = [key for key in self._cities if key not in self._countries]
        for key in orphans:
            del self._cities[key]
        stats = CleanupStats(renormalized=renormalized, orphans_removed=len(orphans))
        if renormalized or orphans:
            self._log.info(
                "Cache cleanup: renormalized=%d orphans_removed=%d",
                stats.renormalized,
                stats.orphans_removed,
            )
        return stats

    def get(self, key: str) -> Optional[Tuple[str, str]]:
        country = self._countries.get(key)
        if country is None:
            return None
        return country, self._cities.get(key, UNKNOWN)

    def put(self, key: str, country: str, city: str) -> None:
        self._countries[key] = normalize_country(country)
        self._cities[key] = city

    def save(self) -> None:
        self._storage.set(COUNTRY_CACHE_KEY, json.dumps(self._countries))
        self._storage.set(CITY_CACHE_KEY, json.dumps(self._cities))
        self._log.debug("Saved %d cache entries", len(self._countries))

    def __len__(self) -> int:
        return len(self._countries)

    def __contains__(self, key: object) -> bool:
        return key in self._countries


__all__ = ["GeoCache", "CleanupStats", "quantize_key"]
