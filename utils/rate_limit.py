from __future__ import annotations

import logging
import time
from typing import Callable, Protocol


logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    def acquire(self) -> float:
        """Block until one unit may proceed; return seconds waited."""
        ...


class NoopLimiter:
    """Limiter that never waits (tests, or pacing disabled via config)."""

    def acquire(self) -> float:
        return 0.0


class TokenBucket:
    """Classic token bucket: ``rate`` tokens per second, at most ``capacity`` banked.

    Clock and sleep are injectable so callers can drive it without wall-clock waits.
    """

    def __init__(
        self,
        rate: float,
        capacity: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.rate = rate
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._tokens = capacity
        self._last = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._last = now

    def acquire(self) -> float:
        self._refill()
        waited = 0.0
        if self._tokens < 1:
            waited = (1 - self._tokens) / self.rate
            logger.debug("Rate limiter waiting %.2fs", waited)
            self._sleep(waited)
            self._refill()
            # Guard against clocks that do not advance with sleep
            self._tokens = max(self._tokens, 1.0)
        self._tokens -= 1
        return waited


def limiter_for_interval(
    seconds: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> RateLimiter:
    """One unit per ``seconds``; a non-positive interval disables pacing."""
    if seconds <= 0:
        return NoopLimiter()
    return TokenBucket(rate=1.0 / seconds, capacity=1.0, clock=clock, sleep=sleep)
