"""Service layer package.

Exports the aggregation services consumed by the CLI and report layers.
"""

from .stats_service import StatsAggregator
from .stats_runner import SnapshotCallback, StatsRunner

__all__ = ["StatsAggregator", "StatsRunner", "SnapshotCallback"]
