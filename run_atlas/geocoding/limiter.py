"""In-flight cap and 429 back-off for reverse geocoding requests."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import logging
import random
import threading
import time
from typing import Iterator

from ..config import (
    NETWORK_MAX_CONCURRENT_LOOKUPS,
    RATE_LIMIT_JITTER_RANGE,
    RATE_LIMIT_THROTTLE_SECONDS,
)

__all__ = ["RequestLimiter", "SlotOutcome"]


@dataclass
class SlotOutcome:
    """Filled in by the caller while it holds a slot."""

    status_code: int | None = None
    retry_after: float | None = None


class RequestLimiter:
    """Blocks callers beyond ``capacity`` concurrent lookups.

    An HTTP 429 pauses every later request for ``Retry-After`` seconds when the
    server sends one, otherwise for ``throttle_seconds``.
    """

    def __init__(
        self,
        max_concurrent: int = NETWORK_MAX_CONCURRENT_LOOKUPS,
        jitter_range: tuple[float, float] = RATE_LIMIT_JITTER_RANGE,
        throttle_seconds: float = RATE_LIMIT_THROTTLE_SECONDS,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._cond = threading.Condition(threading.Lock())
        self._capacity = max_concurrent
        self._active = 0
        self._paused_until = 0.0
        self._throttle_events = 0
        self._jitter_range = jitter_range
        self._throttle_seconds = throttle_seconds
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def capacity(self) -> int:
        return self._capacity

    def resize(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        with self._cond:
            previous, self._capacity = self._capacity, capacity
            self._cond.notify_all()
        self._log.info("Lookup capacity changed from %d to %d", previous, capacity)

    def acquire(self) -> None:
        with self._cond:
            while self._active >= self._capacity:
                self._cond.wait()
            self._active += 1
            pause = self._paused_until - time.monotonic()
        if pause > 0:
            time.sleep(pause)
        low, high = self._jitter_range
        if high > 0:
            time.sleep(random.uniform(low, high))  # nosec B311

    def release(
        self, status_code: int | None = None, retry_after: float | None = None
    ) -> None:
        with self._cond:
            if status_code == 429:
                pause = retry_after if retry_after is not None else self._throttle_seconds
                self._paused_until = max(self._paused_until, time.monotonic() + pause)
                self._throttle_events += 1
            self._active = max(0, self._active - 1)
            self._cond.notify()
        if status_code == 429:
            self._log.warning("Reverse geocoder answered 429; pausing %.1fs", pause)

    @contextmanager
    def slot(self) -> Iterator[SlotOutcome]:
        """Hold one slot for the duration of the block; always released."""

        outcome = SlotOutcome()
        self.acquire()
        try:
            yield outcome
        finally:
            self.release(outcome.status_code, outcome.retry_after)

    def stats(self) -> dict[str, float | int]:
        with self._cond:
            return {
                "capacity": self._capacity,
                "active": self._active,
                "paused_for": max(0.0, self._paused_until - time.monotonic()),
                "throttle_events": self._throttle_events,
            }
