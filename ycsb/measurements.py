"""Per-operation latency statistics."""

from __future__ import annotations

import enum
import threading
from abc import ABC, abstractmethod

from ycsb.properties import Properties
from ycsb.utils import YcsbError

__all__ = [
    "Operation",
    "Measurements",
    "BasicMeasurements",
    "HdrHistogramMeasurements",
    "create_measurements",
]

MEASUREMENT_TYPE = "measurementtype"
MEASUREMENT_TYPE_DEFAULT = "hdrhistogram"

_UINT64_MAX = (1 << 64) - 1
_INT64_MAX = (1 << 63) - 1


class Operation(enum.IntEnum):
    """Kinds of database operation, successful and failed."""

    INSERT = 0
    READ = 1
    UPDATE = 2
    SCAN = 3
    READMODIFYWRITE = 4
    DELETE = 5
    INSERT_FAILED = 6
    READ_FAILED = 7
    UPDATE_FAILED = 8
    SCAN_FAILED = 9
    READMODIFYWRITE_FAILED = 10
    DELETE_FAILED = 11

    @property
    def label(self) -> str:
        """Name used in status reports, e.g. ``INSERT-FAILED``."""
        return self.name.replace("_", "-")


class Measurements(ABC):
    """Collects latencies (nanoseconds) per operation."""

    @abstractmethod
    def report(self, op: Operation, latency: int) -> None:
        """Record one latency sample for ``op``."""

    @abstractmethod
    def status_message(self) -> str:
        """Summarise the samples collected so far."""

    @abstractmethod
    def reset(self) -> None:
        """Forget every sample."""


class BasicMeasurements(Measurements):
    """Tracks count, sum, min and max per operation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def report(self, op: Operation, latency: int) -> None:
        with self._lock:
            self._count[op] += 1
            self._sum[op] += latency
            self._min[op] = min(self._min[op], latency)
            self._max[op] = max(self._max[op], latency)

    def status_message(self) -> str:
        parts = []
        total = 0
        with self._lock:
            for op in Operation:
                cnt = self._count[op]
                if cnt == 0:
                    continue
                parts.append(
                    f" [{op.label}: Count={cnt}"
                    f" Max={self._max[op] / 1000.0:.2f}"
                    f" Min={self._min[op] / 1000.0:.2f}"
                    f" Avg={self._sum[op] / cnt / 1000.0:.2f}]"
                )
                total += cnt
        return f"{total} operations;" + "".join(parts)

    def reset(self) -> None:
        n = len(Operation)
        with self._lock:
            self._count = [0] * n
            self._sum = [0] * n
            self._min = [_UINT64_MAX] * n
            self._max = [0] * n


class _HdrHistogram:
    """High dynamic range histogram with a fixed number of significant digits."""

    def __init__(self, lowest: int, highest: int, significant_figures: int) -> None:
        largest_single_unit = 2 * 10**significant_figures
        sub_bucket_count_magnitude = (largest_single_unit - 1).bit_length()
        self._half_magnitude = max(sub_bucket_count_magnitude, 1) - 1
        self._unit_magnitude = lowest.bit_length() - 1
        self._sub_bucket_count = 1 << (self._half_magnitude + 1)
        self._half_count = self._sub_bucket_count // 2
        self._mask = (self._sub_bucket_count - 1) << self._unit_magnitude

        smallest_untrackable = self._sub_bucket_count << self._unit_magnitude
        buckets = 1
        while smallest_untrackable <= highest:
            if smallest_untrackable > _INT64_MAX // 2:
                buckets += 1
                break
            smallest_untrackable <<= 1
            buckets += 1
        self._counts_len = (buckets + 1) * self._half_count
        self.reset()

    def reset(self) -> None:
        self.counts = [0] * self._counts_len
        self.total_count = 0
        self._min = _INT64_MAX
        self._max = 0

    def _bucket_index(self, value: int) -> int:
        return (value | self._mask).bit_length() - self._unit_magnitude - (
            self._half_magnitude + 1
        )

    def _sub_bucket_index(self, value: int, bucket: int) -> int:
        return value >> (bucket + self._unit_magnitude)

    def _value_from(self, bucket: int, sub_bucket: int) -> int:
        return sub_bucket << (bucket + self._unit_magnitude)

    def _counts_index(self, value: int) -> int:
        bucket = self._bucket_index(value)
        sub_bucket = self._sub_bucket_index(value, bucket)
        base = (bucket + 1) << self._half_magnitude
        return base + sub_bucket - self._half_count

    def _value_at_index(self, index: int) -> int:
        bucket = (index >> self._half_magnitude) - 1
        sub_bucket = (index & (self._half_count - 1)) + self._half_count
        if bucket < 0:
            sub_bucket -= self._half_count
            bucket = 0
        return self._value_from(bucket, sub_bucket)

    def _range_size(self, value: int) -> int:
        bucket = self._bucket_index(value)
        sub_bucket = self._sub_bucket_index(value, bucket)
        if sub_bucket >= self._sub_bucket_count:
            bucket += 1
        return 1 << (self._unit_magnitude + bucket)

    def _lowest_equivalent(self, value: int) -> int:
        bucket = self._bucket_index(value)
        return self._value_from(bucket, self._sub_bucket_index(value, bucket))

    def _highest_equivalent(self, value: int) -> int:
        return self._lowest_equivalent(value) + self._range_size(value) - 1

    def _median_equivalent(self, value: int) -> int:
        return self._lowest_equivalent(value) + (self._range_size(value) >> 1)

    def record(self, value: int) -> bool:
        if value < 0:
            return False
        index = self._counts_index(value)
        if not 0 <= index < self._counts_len:
            return False
        self.counts[index] += 1
        self.total_count += 1
        if value != 0 and value < self._min:
            self._min = value
        if value > self._max:
            self._max = value
        return True

    def min(self) -> int:
        if self.counts[0] > 0:
            return 0
        if self._min == _INT64_MAX:
            return _INT64_MAX
        return self._lowest_equivalent(self._min)

    def max(self) -> int:
        if self._max == 0:
            return 0
        return self._highest_equivalent(self._max)

    def mean(self) -> float:
        if self.total_count == 0:
            return 0.0
        total = sum(
            count * self._median_equivalent(self._value_at_index(index))
            for index, count in enumerate(self.counts)
            if count
        )
        return total / self.total_count

    def value_at_percentile(self, percentile: float) -> int:
        requested = min(percentile, 100.0)
        wanted = max(int((requested / 100.0) * self.total_count + 0.5), 1)
        running = 0
        for index, count in enumerate(self.counts):
            running += count
            if running >= wanted:
                value = self._value_at_index(index)
                if percentile == 0.0:
                    return self._lowest_equivalent(value)
                return self._highest_equivalent(value)
        return 0


class HdrHistogramMeasurements(Measurements):
    """Histogram-based measurements that also report tail percentiles."""

    _PERCENTILES = ((90.0, "90"), (99.0, "99"), (99.9, "99.9"), (99.99, "99.99"))

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._histograms = [_HdrHistogram(10, 100 * 1000 * 1000 * 1000, 3) for _ in Operation]

    def report(self, op: Operation, latency: int) -> None:
        with self._lock:
            self._histograms[op].record(latency)

    def status_message(self) -> str:
        parts = []
        total = 0
        with self._lock:
            for op in Operation:
                hist = self._histograms[op]
                cnt = hist.total_count
                if cnt == 0:
                    continue
                text = (
                    f" [{op.label}: Count={cnt}"
                    f" Max={hist.max() / 1000.0:.2f}"
                    f" Min={hist.min() / 1000.0:.2f}"
                    f" Avg={hist.mean() / 1000.0:.2f}"
                )
                for pct, name in self._PERCENTILES:
                    text += f" {name}={hist.value_at_percentile(pct) / 1000.0:.2f}"
                parts.append(text + "]")
                total += cnt
        return f"{total} operations;" + "".join(parts)

    def reset(self) -> None:
        with self._lock:
            for hist in self._histograms:
                hist.reset()


def create_measurements(props: Properties) -> Measurements:
    """Build the measurements named by the ``measurementtype`` property."""
    name = props.get(MEASUREMENT_TYPE, MEASUREMENT_TYPE_DEFAULT)
    if name == "basic":
        return BasicMeasurements()
    if name == "hdrhistogram":
        return HdrHistogramMeasurements()
    raise YcsbError("Unknown measurements name")