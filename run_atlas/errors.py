"""Central error types used across the application.

Every error below is recovered where it is raised or one level up; none of
them aborts an aggregation run. A point outside every known country is not an
error at all: the geocoder answers ``Unknown`` with zero confidence.
"""

from __future__ import annotations


class RunAtlasError(RuntimeError):
    """Base error for run_atlas failures."""


class InvalidCoordinate(RunAtlasError, ValueError):
    """Raised when a latitude/longitude is non-finite or out of range."""

    def __init__(self, lat: float, lon: float) -> None:
        super().__init__(f"Invalid coordinate lat={lat!r} lon={lon!r}")
        self.lat = lat
        self.lon = lon


class InvalidDistance(RunAtlasError, ValueError):
    """Raised when a computed route distance is non-finite or negative."""

    def __init__(self, value: float) -> None:
        super().__init__(f"Invalid route distance {value!r} km")
        self.value = value


class CorruptedCache(RunAtlasError):
    """Raised when a persisted cache map fails to decode or has the wrong shape."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Cache map '{key}' discarded: {reason}")
        self.key = key
        self.reason = reason


class RouteFormatError(RunAtlasError):
    """Raised when a routes file cannot be read or has no usable structure."""


class GeocodeError(RunAtlasError):
    """Base error for geocode provider failures."""


class NetworkGeocodeFailure(GeocodeError):
    """Raised by the network fallback when a reverse lookup yields nothing usable.

    ``kind`` is one of ``timeout``, ``no_result`` or ``transport``.
    """

    TIMEOUT = "timeout"
    NO_RESULT = "no_result"
    TRANSPORT = "transport"

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind


__all__ = [
    "RunAtlasError",
    "InvalidCoordinate",
    "InvalidDistance",
    "CorruptedCache",
    "RouteFormatError",
    "GeocodeError",
    "NetworkGeocodeFailure",
]
