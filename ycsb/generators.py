"""Number generators that drive key, field and operation choices."""

from __future__ import annotations

import math
import random
import threading
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from ycsb.utils import (
    YcsbError,
    fnv_hash64,
    thread_local_random_double,
    thread_local_random_int,
)

__all__ = [
    "Generator",
    "ConstGenerator",
    "CounterGenerator",
    "AcknowledgedCounterGenerator",
    "UniformGenerator",
    "DiscreteGenerator",
    "RandomByteGenerator",
    "ZipfianGenerator",
    "ScrambledZipfianGenerator",
    "SkewedLatestGenerator",
]

_MASK_64 = (1 << 64) - 1

T = TypeVar("T")


class Generator(ABC, Generic[T]):
    """Produces a stream of values and remembers the latest one."""

    @abstractmethod
    def next(self) -> T:
        """Produce the next value."""

    @abstractmethod
    def last(self) -> T:
        """Return the most recently produced value."""


class ConstGenerator(Generator[int]):
    """Always yields the same number."""

    def __init__(self, constant: int) -> None:
        self._constant = constant & _MASK_64

    def next(self) -> int:
        return self._constant

    def last(self) -> int:
        return self._constant


class CounterGenerator(Generator[int]):
    """Thread-safe counter yielding ``start``, ``start + 1``, ..."""

    def __init__(self, start: int) -> None:
        self._lock = threading.Lock()
        self._counter = start & _MASK_64

    def next(self) -> int:
        with self._lock:
            value = self._counter
            self._counter = (value + 1) & _MASK_64
        return value

    def last(self) -> int:
        with self._lock:
            return (self._counter - 1) & _MASK_64


class AcknowledgedCounterGenerator(CounterGenerator):
    """Counter whose ``last`` only advances past values that have been acknowledged."""

    WINDOW_SIZE = 1 << 16
    _WINDOW_MASK = WINDOW_SIZE - 1

    def __init__(self, start: int) -> None:
        super().__init__(start)
        self._limit = (start - 1) & _MASK_64
        self._window = [False] * self.WINDOW_SIZE
        self._ack_lock = threading.Lock()

    def last(self) -> int:
        return self._limit

    def acknowledge(self, value: int) -> None:
        """Mark ``value`` as done and advance the limit over every contiguous done value."""
        with self._ack_lock:
            slot = value & self._WINDOW_MASK
            if self._window[slot]:
                raise YcsbError("Not enough window size")
            self._window[slot] = True
            limit = self._limit
            for offset in range(1, self.WINDOW_SIZE):
                slot = ((limit + offset) & _MASK_64) & self._WINDOW_MASK
                if not self._window[slot]:
                    break
                self._window[slot] = False
            else:
                offset = self.WINDOW_SIZE
            self._limit = (limit + offset - 1) & _MASK_64


# Default seed of the 64-bit Mersenne Twister; every generator replays the same stream.
_MT_DEFAULT_SEED = 5489


class UniformGenerator(Generator[int]):
    """Uniformly distributed integers in ``[low, high]``, both inclusive."""

    def __init__(self, low: int, high: int) -> None:
        self._low = low & _MASK_64
        self._high = high & _MASK_64
        if self._low > self._high:
            raise ValueError(f"empty range [{self._low}, {self._high}]")
        self._rng = random.Random(_MT_DEFAULT_SEED)
        self._lock = threading.Lock()
        self._last = self._low
        self.next()

    def next(self) -> int:
        with self._lock:
            self._last = self._rng.randint(self._low, self._high)
            return self._last

    def last(self) -> int:
        return self._last


class DiscreteGenerator(Generator[T]):
    """Chooses among weighted values."""

    def __init__(self) -> None:
        self._values: list[tuple[T, float]] = []
        self._sum = 0.0
        self._last: T | None = None

    def add_value(self, value: T, weight: float) -> None:
        """Add ``value`` with relative ``weight``."""
        if not self._values:
            self._last = value
        self._values.append((value, weight))
        self._sum += weight

    def next(self) -> T:
        if not self._values:
            raise YcsbError("No values to choose from")
        chooser = thread_local_random_double()
        for value, weight in self._values:
            share = weight / self._sum
            if chooser < share:
                self._last = value
                return value
            chooser -= share
        return self._last  # type: ignore[return-value]

    def last(self) -> T:
        return self._last  # type: ignore[return-value]


_BYTE_LAYOUT = ((0, 31), (5, 63), (10, 95), (15, 31), (20, 63), (25, 95))


class RandomByteGenerator(Generator[str]):
    """Printable random characters, six drawn from each random integer."""

    def __init__(self) -> None:
        self._buf = ["\0"] * len(_BYTE_LAYOUT)
        self._off = len(_BYTE_LAYOUT)

    def next(self) -> str:
        if self._off == len(_BYTE_LAYOUT):
            bits = thread_local_random_int()
            self._buf = [chr(((bits >> shift) & mask) + ord(" ")) for shift, mask in _BYTE_LAYOUT]
            self._off = 0
        char = self._buf[self._off]
        self._off += 1
        return char

    def last(self) -> str:
        return self._buf[(self._off - 1) % len(_BYTE_LAYOUT)]


ZIPFIAN_CONST = 0.99
MAX_NUM_ITEMS = _MASK_64 >> 24

# Terms summed one by one before the tail is closed with Euler-Maclaurin.
_EXACT_TERMS = 100_000


def _power_sum(first: int, last: int, theta: float) -> float:
    """Sum of ``i ** -theta`` for ``i`` in ``[first, last]``; long tails are summed in closed form."""
    total = 0.0
    stop = min(last, first + _EXACT_TERMS - 1)
    for i in range(first, stop + 1):
        total += 1.0 / i**theta
    if stop >= last:
        return total
    a = float(stop + 1)
    b = float(last)
    if theta == 1.0:
        integral = math.log(b / a)
    else:
        power = 1.0 - theta
        integral = a**power * math.expm1(power * math.log(b / a)) / power

    def d1(x: float) -> float:
        return -theta * x ** (-theta - 1.0)

    def d3(x: float) -> float:
        return -theta * (theta + 1.0) * (theta + 2.0) * x ** (-theta - 3.0)

    tail = (
        integral
        + (a**-theta + b**-theta) / 2.0
        + (d1(b) - d1(a)) / 12.0
        - (d3(b) - d3(a)) / 720.0
    )
    return total + tail


def _zeta(last_num: int, cur_num: int, theta: float, last_zeta: float) -> float:
    """Extend the zeta constant computed for ``last_num`` items to ``cur_num`` items."""
    if cur_num <= last_num:
        return last_zeta
    return last_zeta + _power_sum(last_num + 1, cur_num, theta)


def _check_item_count(items: int) -> None:
    if not 2 <= items < MAX_NUM_ITEMS:
        raise ValueError(f"item count {items} out of range [2, {MAX_NUM_ITEMS})")


class ZipfianGenerator(Generator[int]):
    """Zipf-distributed integers in ``[low, high]``; small values are the most popular.

    ``ZipfianGenerator(n)`` covers ``[0, n - 1]``.
    """

    def __init__(
        self,
        low: int,
        high: int | None = None,
        zipfian_const: float = ZIPFIAN_CONST,
        zeta_n: float | None = None,
    ) -> None:
        if high is None:
            low, high = 0, low - 1
        items = (high - low + 1) & _MASK_64
        _check_item_count(items)
        self._items = items
        self._base = low & _MASK_64
        self._theta = zipfian_const
        self._zeta_2 = _zeta(0, 2, self._theta, 0.0)
        self._alpha = 1.0 / (1.0 - self._theta)
        self._zeta_n = zeta_n if zeta_n is not None else _zeta(0, items, self._theta, 0.0)
        self._count_for_zeta = items
        self._eta = self._compute_eta()
        self._lock = threading.Lock()
        self._last = self._base
        self.next()

    def _compute_eta(self) -> float:
        return (1 - (2.0 / self._items) ** (1 - self._theta)) / (1 - self._zeta_2 / self._zeta_n)

    def next(self, num_items: int | None = None) -> int:
        """Draw a value from ``[base, base + num_items)``, defaulting to the configured range."""
        num = self._items if num_items is None else num_items
        _check_item_count(num)
        if num != self._count_for_zeta:
            with self._lock:
                if num > self._count_for_zeta:
                    self._zeta_n = _zeta(self._count_for_zeta, num, self._theta, self._zeta_n)
                    self._count_for_zeta = num
                    self._eta = self._compute_eta()

        u = thread_local_random_double()
        uz = u * self._zeta_n
        if uz < 1.0:
            value = self._base
        elif uz < 1.0 + 0.5**self._theta:
            value = self._base + 1
        else:
            spread = max(0.0, self._eta * u - self._eta + 1) ** self._alpha
            value = int(self._base + num * spread)
        self._last = value
        return value

    def last(self) -> int:
        return self._last


class ScrambledZipfianGenerator(Generator[int]):
    """Zipfian popularity spread over ``[low, high]`` by hashing.

    ``ScrambledZipfianGenerator(n)`` covers ``[0, n - 1]``.
    """

    _USED_ZIPFIAN_CONSTANT = 0.99
    _ZETAN = 26.46902820178302
    _ITEM_COUNT = 10_000_000_000

    def __init__(
        self, low: int, high: int | None = None, zipfian_const: float = ZIPFIAN_CONST
    ) -> None:
        if high is None:
            low, high = 0, low - 1
        self._base = low & _MASK_64
        self._num_items = (high - low + 1) & _MASK_64
        if self._num_items == 0:
            raise ValueError("empty range")
        if zipfian_const == self._USED_ZIPFIAN_CONSTANT:
            self._generator = ZipfianGenerator(0, self._ITEM_COUNT, zipfian_const, self._ZETAN)
        else:
            self._generator = ZipfianGenerator(0, self._ITEM_COUNT, zipfian_const)

    def _scramble(self, value: int) -> int:
        return self._base + fnv_hash64(value) % self._num_items

    def next(self) -> int:
        return self._scramble(self._generator.next())

    def last(self) -> int:
        return self._scramble(self._generator.last())


class SkewedLatestGenerator(Generator[int]):
    """Favours values close to the latest value of a counter."""

    def __init__(self, counter: CounterGenerator) -> None:
        self._basis = counter
        self._zipfian = ZipfianGenerator(counter.last())
        self._last = 0
        self.next()

    def next(self) -> int:
        top = self._basis.last()
        self._last = (top - self._zipfian.next(top)) & _MASK_64
        return self._last

    def last(self) -> int:
        return self._last