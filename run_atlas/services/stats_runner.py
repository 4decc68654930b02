"""Background execution of aggregation runs where a newer run supersedes older ones."""

from __future__ import annotations

from dataclasses import replace
import logging
import threading
from typing import Callable, Iterable, Optional

from ..models import Route, Snapshot
from .stats_service import StatsAggregator

SnapshotCallback = Callable[[Snapshot], None]


class StatsRunner:
    """Runs one aggregation at a time on a daemon thread.

    Each :meth:`submit` bumps the generation and cancels the previous run.
    Snapshots carry their generation and are delivered only while it is still
    the current one, so ``on_snapshot`` never sees results of a superseded run.
    """

    def __init__(
        self,
        aggregator_factory: Callable[[], StatsAggregator],
        on_snapshot: SnapshotCallback,
    ) -> None:
        self._factory = aggregator_factory
        self._on_snapshot = on_snapshot
        self._lock = threading.RLock()
        self._generation = 0
        self._cancel: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._latest: Optional[Snapshot] = None
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def latest(self) -> Optional[Snapshot]:
        """Last snapshot handed to ``on_snapshot``."""

        with self._lock:
            return self._latest

    def submit(self, routes: Iterable[Route]) -> int:
        route_list = list(routes)
        with self._lock:
            if self._cancel is not None:
                self._cancel.set()
            self._generation += 1
            generation = self._generation
            cancel_event = threading.Event()
            self._cancel = cancel_event
            thread = threading.Thread(
                target=self._work,
                args=(generation, route_list, cancel_event),
                name=f"stats-run-{generation}",
                daemon=True,
            )
            self._thread = thread
        self._log.info(
            "Starting stats run generation=%d with %d routes",
            generation,
            len(route_list),
        )
        thread.start()
        return generation

    def cancel(self) -> None:
        with self._lock:
            if self._cancel is not None:
                self._cancel.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Join the current run; ``True`` when it has finished."""

        with self._lock:
            thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _work(
        self,
        generation: int,
        routes: list[Route],
        cancel_event: threading.Event,
    ) -> None:
        try:
            aggregator = self._factory()
            for snapshot in aggregator.run(routes, cancel_event):
                if not self._deliver(replace(snapshot, generation=generation)):
                    cancel_event.set()
                    break
        except Exception as exc:
            self._log.error(
                "Stats run generation=%d failed: %s", generation, exc, exc_info=True
            )

    def _deliver(self, snapshot: Snapshot) -> bool:
        with self._lock:
            if snapshot.generation != self._generation:
                self._log.debug(
                    "Dropping stale snapshot generation=%d (current=%d)",
                    snapshot.generation,
                    self._generation,
                )
                return False
            self._latest = snapshot
            try:
                self._on_snapshot(snapshot)
            except Exception as exc:
                self._log.error(
                    "Snapshot callback failed: %s", exc, exc_info=True
                )
            return True


__all__ = ["StatsRunner", "SnapshotCallback"]
