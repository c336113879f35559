"""Synchronisation and timing helpers: a countdown latch, a rate limiter and a timer."""

from __future__ import annotations

import threading
import time

__all__ = ["CountDownLatch", "RateLimiter", "Timer"]

_NS_PER_SEC = 1_000_000_000


class CountDownLatch:
    """Lets threads wait until a counter reaches zero."""

    def __init__(self, count: int) -> None:
        self._count = count
        self._cond = threading.Condition()

    def wait(self) -> None:
        """Block until the count reaches zero."""
        with self._cond:
            self._cond.wait_for(lambda: self._count <= 0)

    def wait_for(self, timeout_sec: float) -> bool:
        """Wait at most ``timeout_sec`` seconds; return True if the count reached zero."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count <= 0, timeout=timeout_sec)

    def count_down(self) -> None:
        """Decrement the count, waking waiters when it reaches zero."""
        with self._cond:
            self._count -= 1
            if self._count <= 0:
                self._cond.notify_all()


class RateLimiter:
    """Token bucket limiting a single client to ``rate`` operations per second."""

    TOKEN_PRECISION = 10000

    def __init__(self, rate: int, burst: int) -> None:
        self._lock = threading.Lock()
        self._rate = rate * self.TOKEN_PRECISION
        self._burst = burst * self.TOKEN_PRECISION
        self._tokens = 0
        self._last = time.monotonic_ns()

    def consume(self, n: int) -> None:
        """Take ``n`` tokens, sleeping if the bucket runs dry."""
        wait_ns = 0
        with self._lock:
            if self._rate <= 0:
                return
            now = time.monotonic_ns()
            diff = now - self._last
            self._tokens = min(self._burst, self._tokens + diff * self._rate // _NS_PER_SEC)
            self._last = now
            self._tokens -= n * self.TOKEN_PRECISION
            if self._tokens < 0:
                wait_ns = -self._tokens * _NS_PER_SEC // self._rate
        if wait_ns > 0:
            time.sleep(wait_ns / _NS_PER_SEC)

    def set_rate(self, rate: int) -> None:
        """Refill the bucket at the old rate, then switch to ``rate`` per second."""
        with self._lock:
            now = time.monotonic_ns()
            diff = now - self._last
            refill = diff * self._rate * self.TOKEN_PRECISION // _NS_PER_SEC
            self._tokens = min(self._burst, self._tokens + refill)
            self._last = now
            self._rate = rate * self.TOKEN_PRECISION


class Timer:
    """Measures elapsed time: float seconds, or integer nanoseconds when ``ns`` is set."""

    def __init__(self, ns: bool = False) -> None:
        self._ns = ns
        self._start = time.perf_counter_ns()

    def start(self) -> None:
        """Record the start time."""
        self._start = time.perf_counter_ns()

    def end(self) -> float | int:
        """Return the time elapsed since :meth:`start`."""
        elapsed = time.perf_counter_ns() - self._start
        if self._ns:
            return elapsed
        return elapsed / _NS_PER_SEC