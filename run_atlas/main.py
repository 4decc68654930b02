import argparse
import logging
from typing import List, Optional, Sequence

from .cache import JsonFileStorage
from .config import (
    GEO_CACHE_FILE,
    GEOCODER_BACKEND,
    ROUTE_SEGMENTATION_ENABLED,
    SAMPLE_MAX_POINTS,
    SEGMENT_MAX_GAP_M,
    SNAPSHOT_EVERY_ROUTES,
)
from .errors import RouteFormatError
from .geocoding import GeocodeProvider, LocalGeocoder, NetworkGeocoder
from .models import Route, Snapshot
from .report import format_summary, write_report
from .route_io import expand_segments, filter_categories, load_routes
from .services import StatsAggregator, StatsRunner


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    elif verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Break down total running distance by country and city."
    )
    parser.add_argument("routes", help="Routes file (.json or .gpx)")
    parser.add_argument(
        "--cache",
        default=GEO_CACHE_FILE,
        help=f"Geocode cache file (default: {GEO_CACHE_FILE})",
    )
    parser.add_argument("--output", help="Write an Excel report to this path")
    parser.add_argument(
        "--top", type=int, default=3, help="Entries listed per ranking (default: 3)"
    )
    segment_group = parser.add_mutually_exclusive_group()
    segment_group.add_argument(
        "--max-gap-m",
        type=float,
        default=SEGMENT_MAX_GAP_M,
        help=f"Split routes at GPS gaps above this many metres (default: {SEGMENT_MAX_GAP_M})",
    )
    segment_group.add_argument(
        "--no-segment",
        action="store_true",
        help="Use routes as recorded, without gap segmentation",
    )
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        help="Only include routes of this category (repeatable)",
    )
    parser.add_argument(
        "--network",
        action="store_true",
        default=GEOCODER_BACKEND == "network",
        help="Use the online reverse geocoder instead of the built-in table",
    )
    parser.add_argument(
        "--snapshot-every",
        type=int,
        default=SNAPSHOT_EVERY_ROUTES,
        help=f"Log progress every N routes (default: {SNAPSHOT_EVERY_ROUTES})",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    args = parser.parse_args(argv)
    if args.snapshot_every < 1:
        parser.error("--snapshot-every must be >= 1")
    if args.max_gap_m <= 0:
        parser.error("--max-gap-m must be greater than zero")
    return args


def _prepare_routes(args: argparse.Namespace) -> List[Route]:
    routes = load_routes(args.routes)
    routes = filter_categories(routes, args.category)
    if ROUTE_SEGMENTATION_ENABLED and not args.no_segment:
        before = len(routes)
        routes = expand_segments(routes, args.max_gap_m)
        logging.info("Segmentation turned %d routes into %d", before, len(routes))
    return routes


def _build_provider(use_network: bool) -> GeocodeProvider:
    if use_network:
        logging.info("Using network reverse geocoder")
        return NetworkGeocoder()
    return LocalGeocoder()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _setup_logging(args.verbose)

    try:
        routes = _prepare_routes(args)
    except RouteFormatError as exc:
        logging.error("Failed to load routes '%s': %s", args.routes, exc)
        return 1

    storage = JsonFileStorage(args.cache)
    provider = _build_provider(args.network)

    def _aggregator() -> StatsAggregator:
        return StatsAggregator(
            storage,
            provider,
            snapshot_every=args.snapshot_every,
            max_samples=SAMPLE_MAX_POINTS,
        )

    def _progress(snapshot: Snapshot) -> None:
        if not snapshot.done:
            logging.info(
                "Progress: %d/%d routes, %d unique coordinates",
                snapshot.processed,
                snapshot.total,
                snapshot.unique_coords,
            )

    runner = StatsRunner(_aggregator, _progress)
    runner.submit(routes)
    try:
        runner.wait()
    except KeyboardInterrupt:
        runner.cancel()
        logging.warning("Interrupted; cache left unchanged")
        return 130

    result = runner.latest
    if result is None or not result.done:
        logging.error("Aggregation did not complete")
        return 1

    print(format_summary(result, top=args.top))
    if args.output:
        write_report(args.output, result)
    return 0


__all__ = ["main", "parse_args"]
