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

"""Per-metric time series plus the baselines used to compute deltas."""

from __future__ import annotations

import threading

from ..runtime.logging import StructuredLogger, get_logger
from ..stats import Distribution, Histogram
from ._buffer import (
    DEFAULT_CAPACITY,
    DEFAULT_INTERVAL_S,
    Payload,
    Sample,
    TimeSeriesBuffer,
)

type Cumulative = int | float | Histogram
"""A registry's running total for one metric."""


class TimeSeriesStore:
    """Buffers keyed by metric plus the last cumulative value seen per key.

    Writes happen in rounds: every key recorded in one round shares the
    round's tick index and timestamp. Buffers and baselines are created
    on first use and live as long as the store.

    Example::

        store = TimeSeriesStore()
        store.start_round(1_700_000_000)
        delta = store.delta("counter:dogs", 3)
        store.record_tick("counter:dogs", 1_700_000_000, delta)
        store.read("counter:dogs")[-1]  # Sample(timestamp=1700000000, payload=3)

    Args:
        capacity: Samples retained per key.
        interval: Seconds between rounds, used for zero-filled timestamps.
        backfill: Zero-fill new buffers to full capacity.
        logger: Optional structured logger override.
    """

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_CAPACITY,
        interval: int = DEFAULT_INTERVAL_S,
        backfill: bool = True,
        logger: StructuredLogger | None = None,
    ) -> None:
        super().__init__()
        self._capacity = capacity
        self._interval = interval
        self._backfill = backfill
        self._logger = logger or get_logger(__name__)
        self._lock = threading.Lock()
        self._buffers: dict[str, TimeSeriesBuffer] = {}
        self._baselines: dict[str, Cumulative] = {}
        self._tick = -1
        self._round_timestamp: int | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def tick(self) -> int:
        """Index of the current round, -1 before the first round."""
        with self._lock:
            return self._tick

    def start_round(self, timestamp: int) -> int:
        """Open a new round stamped ``timestamp`` and return its tick."""
        with self._lock:
            return self._open_round(timestamp)

    def record_tick(
        self, key: str, timestamp: int, payload: Payload | Histogram
    ) -> None:
        """Append ``payload`` to ``key``'s series for the round at ``timestamp``.

        A timestamp other than the open round's opens the next round.
        Histogram payloads are frozen into a :class:`Distribution`.
        """
        if isinstance(payload, Histogram):
            payload = payload.snapshot()

        with self._lock:
            if timestamp != self._round_timestamp:
                _ = self._open_round(timestamp)
            tick = self._tick
            buffer = self._buffers.get(key)
            if buffer is None:
                buffer = TimeSeriesBuffer(
                    zero=_zero_like(payload),
                    capacity=self._capacity,
                    interval=self._interval,
                    backfill=self._backfill,
                )
                self._buffers[key] = buffer
                self._logger.debug(
                    "Created time series.",
                    event="store.series.created",
                    context={"key": key, "tick": tick},
                )

        buffer.write(tick, timestamp, payload)

    def read(self, key: str) -> tuple[Sample, ...]:
        """Samples for ``key``, oldest first; empty for unknown keys."""
        with self._lock:
            buffer = self._buffers.get(key)
        if buffer is None:
            return ()
        return buffer.read()

    def keys(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._buffers)

    def delta(self, key: str, current: Cumulative) -> Cumulative:
        """Difference between ``current`` and ``key``'s baseline.

        The baseline starts at zero (or an empty histogram) and is replaced
        by a copy of ``current``, so a source may hand out its live
        histogram. ``current`` must not be older than the baseline. A
        subtraction that raises leaves the baseline unchanged.
        """
        if isinstance(current, Histogram):
            current = current.clone()
        with self._lock:
            previous = self._baselines.get(key)
            if previous is None:
                previous = Histogram() if isinstance(current, Histogram) else 0
            difference = current - previous  # type: ignore[operator]
            self._baselines[key] = current
        return difference

    def baseline(self, key: str) -> Cumulative | None:
        with self._lock:
            return self._baselines.get(key)

    def _open_round(self, timestamp: int) -> int:
        self._tick += 1
        self._round_timestamp = timestamp
        return self._tick


def _zero_like(payload: Payload) -> Payload:
    if isinstance(payload, Distribution):
        return Distribution.empty()
    return 0


__all__ = ["Cumulative", "TimeSeriesStore"]
