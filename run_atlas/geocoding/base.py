"""Contract shared by the offline geocoder and the network fallback."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import GeocodeResult

UNKNOWN = "Unknown"


class GeocodeProvider(ABC):
    """Resolve a coordinate to (country, city, confidence).

    ``max_concurrency`` tells the aggregator how many lookups it may have in
    flight at once; pure in-process providers keep the default of 1 and are
    called from the aggregation worker only.
    """

    max_concurrency: int = 1

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def geocode(self, lat: float, lon: float) -> GeocodeResult:
        """Return the geocode for ``(lat, lon)``.

        Implementations raise :class:`~run_atlas.errors.GeocodeError` when a
        lookup cannot be answered for this run.
        """


__all__ = ["GeocodeProvider", "UNKNOWN"]
