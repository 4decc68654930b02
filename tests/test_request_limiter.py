import threading
import time

import pytest

from run_atlas.geocoding.limiter import RequestLimiter


def _quiet(capacity, throttle_seconds=0.2):
    return RequestLimiter(
        max_concurrent=capacity, jitter_range=(0.0, 0.0), throttle_seconds=throttle_seconds
    )


def _hold_slot(limiter, entered, leave):
    with limiter.slot() as outcome:
        entered.set()
        leave.wait()
        outcome.status_code = 200


def _spawn(limiter):
    entered, leave = threading.Event(), threading.Event()
    thread = threading.Thread(target=_hold_slot, args=(limiter, entered, leave), daemon=True)
    thread.start()
    return entered, leave, thread


def test_capacity_blocks_extra_lookup_until_resize():
    limiter = _quiet(2)
    holders = [_spawn(limiter) for _ in range(2)]
    for entered, _, _ in holders:
        assert entered.wait(0.5)

    extra_entered, extra_leave, extra = _spawn(limiter)
    assert not extra_entered.wait(0.1)
    assert limiter.stats()["active"] == 2

    limiter.resize(3)
    assert limiter.capacity == 3
    assert extra_entered.wait(0.5)

    for _, leave, thread in holders + [(extra_entered, extra_leave, extra)]:
        leave.set()
        thread.join(timeout=1.0)
    assert limiter.stats()["active"] == 0


def test_leaving_a_slot_admits_the_next_waiter():
    limiter = _quiet(1)
    first_in, first_out, first = _spawn(limiter)
    assert first_in.wait(0.5)
    second_in, second_out, second = _spawn(limiter)
    assert not second_in.wait(0.1)
    first_out.set()
    assert second_in.wait(0.5)
    second_out.set()
    first.join(timeout=1.0)
    second.join(timeout=1.0)


def test_429_pauses_following_lookups():
    limiter = _quiet(1, throttle_seconds=0.2)
    with limiter.slot() as outcome:
        outcome.status_code = 429
    stats = limiter.stats()
    assert stats["throttle_events"] == 1
    assert stats["paused_for"] > 0
    start = time.monotonic()
    with limiter.slot():
        pass
    assert time.monotonic() - start >= 0.1


def test_retry_after_overrides_default_pause():
    limiter = _quiet(1, throttle_seconds=0.0)
    limiter.acquire()
    limiter.release(429, retry_after=60)
    assert limiter.stats()["paused_for"] > 50


def test_slot_released_when_block_raises():
    limiter = _quiet(1)
    with pytest.raises(RuntimeError):
        with limiter.slot():
            raise RuntimeError("connection reset")
    assert limiter.stats()["active"] == 0
    assert limiter.stats()["throttle_events"] == 0


@pytest.mark.parametrize("bad", [0, -1])
def test_invalid_capacity_rejected(bad):
    with pytest.raises(ValueError):
        RequestLimiter(max_concurrent=bad)
    with pytest.raises(ValueError):
        _quiet(1).resize(bad)
