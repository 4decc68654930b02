"""Load route collections from JSON or GPX files and prepare them for aggregation."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from defusedxml import ElementTree as ET
from polyline import decode as polyline_decode

from .config import SEGMENT_MAX_GAP_M
from .errors import RouteFormatError
from .geometry import LatLon, segment_points
from .models import Route

_LOG = logging.getLogger(__name__)

GPX_NS = {"g": "http://www.topografix.com/GPX/1/1"}


def parse_iso8601(value: str) -> datetime:
    """Parse ISO timestamps and normalise trailing Z."""

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def load_routes(path: str | Path) -> List[Route]:
    """Read routes from ``path`` based on its suffix (``.json`` or ``.gpx``)."""

    path = Path(path)
    if not path.exists():
        raise RouteFormatError(f"Routes file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".json":
        routes = _load_json(path)
    elif suffix == ".gpx":
        routes = _load_gpx(path)
    else:
        raise RouteFormatError(f"Unsupported routes file type: {path.suffix or path}")
    _LOG.info("Loaded %d routes from %s", len(routes), path)
    return routes


def _load_json(path: Path) -> List[Route]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        raise RouteFormatError(f"Cannot read routes from {path}: {exc}") from exc
    if isinstance(payload, Mapping):
        payload = payload.get("routes")
    if not isinstance(payload, list):
        raise RouteFormatError(
            f"{path}: expected a list of routes or an object with a 'routes' list"
        )
    routes: List[Route] = []
    for index, entry in enumerate(payload):
        try:
            routes.append(route_from_dict(entry, fallback_id=f"route-{index + 1}"))
        except (KeyError, TypeError, ValueError) as exc:
            _LOG.warning("Skipping malformed route #%d in %s: %s", index + 1, path, exc)
    return routes


def route_from_dict(entry: Any, fallback_id: str = "route") -> Route:
    """Build a :class:`Route` from one JSON object.

    Points come from ``coordinates`` (``[[lat, lon], ...]``) or, when that is
    absent, from an encoded ``polyline``.
    """

    if not isinstance(entry, Mapping):
        raise TypeError(f"route entry must be an object, got {type(entry).__name__}")
    raw_coords = entry.get("coordinates")
    if raw_coords is None and entry.get("polyline"):
        coordinates: Sequence[LatLon] = polyline_decode(str(entry["polyline"]))
    elif raw_coords is None:
        raise KeyError("route has neither 'coordinates' nor 'polyline'")
    else:
        coordinates = [_pair(item) for item in raw_coords]
    timestamp_raw = entry.get("timestamp")
    timestamp: Optional[datetime] = None
    if timestamp_raw:
        timestamp = parse_iso8601(str(timestamp_raw))
    return Route(
        id=str(entry.get("id") or fallback_id),
        coordinates=coordinates,
        timestamp=timestamp,
        category=str(entry.get("category") or "other"),
        duration_s=float(entry.get("duration_s") or 0.0),
    )


def _pair(item: Any) -> LatLon:
    if not isinstance(item, (list, tuple)) or len(item) < 2:
        raise ValueError(f"coordinate must be [lat, lon], got {item!r}")
    return float(item[0]), float(item[1])


def _load_gpx(path: Path) -> List[Route]:
    try:
        tree = ET.parse(path)
    except (OSError, ValueError, ET.ParseError) as exc:
        raise RouteFormatError(f"Cannot parse GPX {path}: {exc}") from exc
    root = tree.getroot()
    routes: List[Route] = []
    for index, trk in enumerate(root.findall("g:trk", GPX_NS), start=1):
        points: List[LatLon] = []
        first_time: Optional[datetime] = None
        for trkpt in trk.findall(".//g:trkpt", GPX_NS):
            try:
                points.append((float(trkpt.attrib["lat"]), float(trkpt.attrib["lon"])))
            except (KeyError, ValueError) as exc:
                _LOG.warning("Skipping bad trackpoint in %s track %d: %s", path, index, exc)
                continue
            if first_time is None:
                time_el = trkpt.find("g:time", GPX_NS)
                if time_el is not None and time_el.text:
                    try:
                        first_time = parse_iso8601(time_el.text.strip())
                    except ValueError:
                        _LOG.debug("Ignoring unparsable time %r", time_el.text)
        name_el = trk.find("g:name", GPX_NS)
        name = name_el.text.strip() if name_el is not None and name_el.text else ""
        type_el = trk.find("g:type", GPX_NS)
        category = type_el.text.strip() if type_el is not None and type_el.text else "other"
        routes.append(
            Route(
                id=name or f"{path.stem}-{index}",
                coordinates=points,
                timestamp=first_time,
                category=category,
            )
        )
    return routes


def segment_route(route: Route, max_gap_m: float = SEGMENT_MAX_GAP_M) -> List[Route]:
    """Split ``route`` at GPS gaps; a single surviving segment keeps the route id."""

    segments = segment_points(route.coordinates, max_gap_m)
    if len(segments) == 1 and len(segments[0]) == len(route.coordinates):
        return [route]
    return [
        Route(
            id=f"{route.id}#{number}",
            coordinates=segment,
            timestamp=route.timestamp,
            category=route.category,
            duration_s=route.duration_s * len(segment) / len(route.coordinates),
        )
        for number, segment in enumerate(segments, start=1)
    ]


def expand_segments(
    routes: Iterable[Route], max_gap_m: float = SEGMENT_MAX_GAP_M
) -> List[Route]:
    """Replace every route with its gap-free segments."""

    expanded: List[Route] = []
    dropped = 0
    for route in routes:
        segments = segment_route(route, max_gap_m)
        if not segments:
            dropped += 1
        expanded.extend(segments)
    if dropped:
        _LOG.info("Segmentation left %d routes without usable segments", dropped)
    return expanded


def filter_categories(
    routes: Iterable[Route], categories: Optional[Iterable[str]]
) -> List[Route]:
    """Keep routes whose category matches one of ``categories`` (case-insensitive)."""

    wanted = {c.strip().lower() for c in categories or () if c and c.strip()}
    if not wanted:
        return list(routes)
    return [route for route in routes if route.category.lower() in wanted]


__all__ = [
    "GPX_NS",
    "expand_segments",
    "filter_categories",
    "load_routes",
    "parse_iso8601",
    "route_from_dict",
    "segment_route",
]
