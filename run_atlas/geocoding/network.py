"""Reverse geocoding over HTTP (legacy fallback provider).

Slower than :class:`~run_atlas.geocoding.local.LocalGeocoder` and dependent on
a remote service, but it answers for places the compiled table does not
cover. Lookups that time out, come back empty or fail in transport raise
:class:`~run_atlas.errors.NetworkGeocodeFailure`; the aggregator skips those
points for the current run.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Mapping, Tuple

import requests
from cachetools import TTLCache
from requests import Session

from ..config import (
    NETWORK_GEOCODER_URL,
    NETWORK_MAX_CONCURRENT_LOOKUPS,
    NETWORK_NO_RESULT_CACHE_SIZE,
    NETWORK_NO_RESULT_TTL_SECONDS,
    REQUEST_TIMEOUT,
)
from ..errors import NetworkGeocodeFailure
from ..models import GeocodeResult
from .base import GeocodeProvider
from .limiter import RequestLimiter
from .normalization import normalize_country
from .session import create_default_session

_LOG = logging.getLogger(__name__)

_CITY_FIELDS = ("city", "town", "village", "municipality")

_MissKey = Tuple[float, float]


def _retry_after(headers: Mapping[str, str] | None) -> float | None:
    """Seconds from a numeric ``Retry-After`` header, if one was sent."""
    raw = (headers or {}).get("Retry-After")
    try:
        return max(0.0, float(raw)) if raw is not None else None
    except ValueError:
        return None


class NetworkGeocoder(GeocodeProvider):
    """Nominatim-compatible reverse geocoder with bounded concurrency."""

    def __init__(
        self,
        session: Session | None = None,
        *,
        base_url: str = NETWORK_GEOCODER_URL,
        limiter: RequestLimiter | None = None,
        timeout: float = REQUEST_TIMEOUT,
        max_concurrency: int = NETWORK_MAX_CONCURRENT_LOOKUPS,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._session = session or create_default_session()
        self._base_url = base_url
        self._limiter = limiter or RequestLimiter(max_concurrent=max_concurrency)
        self._timeout = timeout
        self.max_concurrency = max_concurrency
        self._no_result: TTLCache[_MissKey, bool] = TTLCache(
            maxsize=max(1, NETWORK_NO_RESULT_CACHE_SIZE),
            ttl=max(1, NETWORK_NO_RESULT_TTL_SECONDS),
        )
        self._no_result_lock = RLock()

    def geocode(self, lat: float, lon: float) -> GeocodeResult:
        miss_key = (round(lat, 3), round(lon, 3))
        with self._no_result_lock:
            if miss_key in self._no_result:
                raise NetworkGeocodeFailure(
                    NetworkGeocodeFailure.NO_RESULT,
                    f"no result for {miss_key} (remembered)",
                )
        try:
            payload = self._fetch(lat, lon)
            return self._parse(payload, lat, lon)
        except NetworkGeocodeFailure as exc:
            if exc.kind == NetworkGeocodeFailure.NO_RESULT:
                with self._no_result_lock:
                    self._no_result[miss_key] = True
            raise

    def _fetch(self, lat: float, lon: float) -> Any:
        params = {"lat": f"{lat:.6f}", "lon": f"{lon:.6f}", "format": "jsonv2"}
        with self._limiter.slot() as outcome:
            _LOG.debug("GET %s params=%s", self._base_url, params)
            try:
                response = self._session.get(
                    self._base_url, params=params, timeout=self._timeout
                )
            except requests.Timeout as exc:
                raise NetworkGeocodeFailure(
                    NetworkGeocodeFailure.TIMEOUT, f"lat={lat} lon={lon}: {exc}"
                ) from exc
            except requests.RequestException as exc:
                raise NetworkGeocodeFailure(
                    NetworkGeocodeFailure.TRANSPORT, f"lat={lat} lon={lon}: {exc}"
                ) from exc
            outcome.status_code = status = response.status_code
            outcome.retry_after = _retry_after(response.headers)

        if status == 404:
            raise NetworkGeocodeFailure(
                NetworkGeocodeFailure.NO_RESULT, f"lat={lat} lon={lon}: HTTP 404"
            )
        if status is None or status >= 400:
            raise NetworkGeocodeFailure(
                NetworkGeocodeFailure.TRANSPORT,
                f"lat={lat} lon={lon}: HTTP {status}",
            )
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkGeocodeFailure(
                NetworkGeocodeFailure.TRANSPORT,
                f"lat={lat} lon={lon}: undecodable response",
            ) from exc

    @staticmethod
    def _parse(payload: Any, lat: float, lon: float) -> GeocodeResult:
        if not isinstance(payload, Mapping) or payload.get("error"):
            raise NetworkGeocodeFailure(
                NetworkGeocodeFailure.NO_RESULT, f"lat={lat} lon={lon}: empty answer"
            )
        address = payload.get("address")
        if not isinstance(address, Mapping):
            raise NetworkGeocodeFailure(
                NetworkGeocodeFailure.NO_RESULT, f"lat={lat} lon={lon}: no address"
            )
        country_raw = address.get("country")
        if not isinstance(country_raw, str) or not country_raw.strip():
            raise NetworkGeocodeFailure(
                NetworkGeocodeFailure.NO_RESULT, f"lat={lat} lon={lon}: no country"
            )
        country = normalize_country(country_raw.strip())
        for field_name in _CITY_FIELDS:
            city = address.get(field_name)
            if isinstance(city, str) and city.strip():
                return GeocodeResult(country=country, city=city.strip(), confidence=0.9)
        return GeocodeResult(country=country, city=f"Other {country}", confidence=0.6)


__all__ = ["NetworkGeocoder"]
