# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Registry contract for cumulative metrics and an in-memory implementation."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Protocol

from ..clock import SYSTEM_CLOCK, MonotonicClock
from ..errors import MetricKindError, MetricNotFoundError
from ._distribution import Distribution
from ._histogram import Histogram


class MetricKind(Enum):
    """Kind of a metric, also its key prefix."""

    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


def metric_key(kind: MetricKind, name: str) -> str:
    """Prefixed key, e.g. ``timing:run``."""
    return f"{kind.value}:{name}"


def parse_key(key: str) -> tuple[MetricKind, str]:
    """Split a prefixed key into kind and name.

    Raises:
        MetricKindError: If the prefix is missing or unknown.
    """
    prefix, sep, name = key.partition(":")
    if not sep:
        raise MetricKindError(f"Metric key has no kind prefix: {key!r}")
    try:
        return MetricKind(prefix), name
    except ValueError:
        raise MetricKindError(f"Unknown metric kind in key: {key!r}") from None


class StatsSource(Protocol):
    """Read side of a metrics registry, as consumed by the sampler.

    Values are cumulative: counters only grow and timing histograms only
    gain observations between reads.
    """

    def all_keys(self) -> frozenset[str]:
        """Every prefixed key the registry knows about."""
        ...

    def current_value(self, key: str) -> int | float:
        """Cumulative value of a ``counter:`` or ``gauge:`` key."""
        ...

    def current_histogram(self, key: str) -> Histogram:
        """Copy of the cumulative histogram behind a ``timing:`` key."""
        ...


class InMemoryStats:
    """Thread-safe in-memory registry of counters, gauges and timings.

    Construct one per process and inject it wherever stats are recorded or
    sampled.

    Example::

        stats = InMemoryStats()
        stats.incr("dogs", 3)
        stats.add_timing("run", 15)
        with stats.time("render"):
            render()

    Args:
        clock: Monotonic clock used by :meth:`time`.
    """

    def __init__(self, *, clock: MonotonicClock = SYSTEM_CLOCK) -> None:
        super().__init__()
        self._clock = clock
        self._lock = threading.Lock()
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, int | float] = {}
        self._timings: dict[str, Histogram] = {}

    def incr(self, name: str, delta: int = 1) -> int:
        """Add ``delta`` to a counter and return its new value."""
        with self._lock:
            value = self._counters.get(name, 0) + delta
            self._counters[name] = value
            return value

    def set_gauge(self, name: str, value: int | float) -> None:
        with self._lock:
            self._gauges[name] = value

    def add_timing(self, name: str, value: int) -> int:
        """Record one timing observation and return the timing's count."""
        with self._lock:
            histogram = self._timings.get(name)
            if histogram is None:
                histogram = Histogram()
                self._timings[name] = histogram
        # Histogram carries its own lock.
        return histogram.add(value)

    @contextmanager
    def time(self, name: str) -> Iterator[None]:
        """Record the duration of the ``with`` body in milliseconds."""
        start = self._clock.monotonic()
        try:
            yield
        finally:
            elapsed_ms = round((self._clock.monotonic() - start) * 1000)
            _ = self.add_timing(name, elapsed_ms)

    def counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def gauge(self, name: str) -> int | float | None:
        with self._lock:
            return self._gauges.get(name)

    def timing(self, name: str) -> Distribution:
        """Snapshot of a timing; empty when nothing was recorded."""
        with self._lock:
            histogram = self._timings.get(name)
        if histogram is None:
            return Distribution.empty()
        return histogram.snapshot()

    def all_keys(self) -> frozenset[str]:
        with self._lock:
            return frozenset(
                [metric_key(MetricKind.COUNTER, name) for name in self._counters]
                + [metric_key(MetricKind.GAUGE, name) for name in self._gauges]
                + [metric_key(MetricKind.TIMING, name) for name in self._timings]
            )

    def current_value(self, key: str) -> int | float:
        kind, name = parse_key(key)
        with self._lock:
            if kind is MetricKind.COUNTER and name in self._counters:
                return self._counters[name]
            if kind is MetricKind.GAUGE and name in self._gauges:
                return self._gauges[name]
        if kind is MetricKind.TIMING:
            raise MetricKindError(f"{key!r} is a timing, not a scalar")
        raise MetricNotFoundError(key)

    def current_histogram(self, key: str) -> Histogram:
        kind, name = parse_key(key)
        if kind is not MetricKind.TIMING:
            raise MetricKindError(f"{key!r} is a {kind.value}, not a timing")
        with self._lock:
            histogram = self._timings.get(name)
        if histogram is None:
            raise MetricNotFoundError(key)
        return histogram.clone()

    def clear(self) -> None:
        """Forget every metric."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._timings.clear()


__all__ = [
    "InMemoryStats",
    "MetricKind",
    "StatsSource",
    "metric_key",
    "parse_key",
]
