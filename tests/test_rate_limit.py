from __future__ import annotations

import pytest

from conftest import FakeClock
from utils.rate_limit import NoopLimiter, TokenBucket, limiter_for_interval


def test_token_bucket_paces_to_rate():
    clock = FakeClock()
    bucket = TokenBucket(rate=0.5, capacity=1, clock=clock, sleep=clock.sleep)
    waits = [bucket.acquire() for _ in range(3)]
    assert waits == [0.0, 2.0, 2.0]
    assert clock.now == 4.0


def test_token_bucket_does_not_wait_after_idle_time():
    clock = FakeClock()
    bucket = TokenBucket(rate=0.5, capacity=1, clock=clock, sleep=clock.sleep)
    bucket.acquire()
    # Slow work between records already covers the courtesy delay
    clock.now += 5
    assert bucket.acquire() == 0.0
    assert clock.sleeps == []


def test_token_bucket_capacity_allows_bursts():
    clock = FakeClock()
    bucket = TokenBucket(rate=1, capacity=3, clock=clock, sleep=clock.sleep)
    assert [bucket.acquire() for _ in range(4)] == [0.0, 0.0, 0.0, 1.0]


def test_token_bucket_with_frozen_clock_still_releases():
    sleeps = []
    bucket = TokenBucket(rate=2, capacity=1, clock=lambda: 10.0, sleep=sleeps.append)
    bucket.acquire()
    bucket.acquire()
    assert sleeps == [0.5]


@pytest.mark.parametrize("rate, capacity", [(0, 1), (-1, 1), (1, 0.5)])
def test_token_bucket_rejects_bad_settings(rate, capacity):
    with pytest.raises(ValueError):
        TokenBucket(rate=rate, capacity=capacity)


def test_limiter_for_interval():
    assert isinstance(limiter_for_interval(0), NoopLimiter)
    clock = FakeClock()
    limiter = limiter_for_interval(2, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    assert limiter.acquire() == 2.0
