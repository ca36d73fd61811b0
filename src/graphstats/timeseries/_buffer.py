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

"""Fixed-capacity ring of timestamped samples for one metric."""

from __future__ import annotations

import threading
from typing import Final

from ..dataclasses import FrozenDataclass
from ..stats import Distribution

DEFAULT_CAPACITY: Final[int] = 60
DEFAULT_INTERVAL_S: Final[int] = 60

type Payload = int | float | Distribution
"""A scalar delta (counters, gauges) or a histogram delta (timings)."""


@FrozenDataclass()
class Sample:
    """One tick's value for one metric.

    Attributes:
        timestamp: Seconds since the epoch of the tick that wrote it.
        payload: Delta over the interval ending at ``timestamp``.
    """

    timestamp: int
    payload: Payload


class TimeSeriesBuffer:
    """Circular buffer of the last ``capacity`` samples for one metric.

    The slot for a write is ``tick % capacity`` where ``tick`` is the
    store's round counter, so once full every write replaces the oldest
    sample. Reads return samples oldest first.

    With ``backfill`` enabled the first write also fills the remaining
    slots with ``zero`` samples stamped one ``interval`` apart going back
    in time, so the series always reports ``capacity`` rows. Rounds that
    skip this buffer are zero-filled the same way on the next write.

    Args:
        zero: Payload used for zero-filled slots.
        capacity: Number of retained samples.
        interval: Seconds between ticks, for zero-filled timestamps.
        backfill: Zero-fill the ring on first write.
    """

    def __init__(
        self,
        *,
        zero: Payload = 0,
        capacity: int = DEFAULT_CAPACITY,
        interval: int = DEFAULT_INTERVAL_S,
        backfill: bool = True,
    ) -> None:
        super().__init__()
        if capacity <= 0:
            msg = "capacity must be positive"
            raise ValueError(msg)
        self._zero = zero
        self._capacity = capacity
        self._interval = interval
        self._backfill = backfill
        self._slots: list[Sample | None] = [None] * capacity
        self._last_tick: int | None = None
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def last_tick(self) -> int | None:
        """Tick of the newest write, None before the first write."""
        with self._lock:
            return self._last_tick

    def write(self, tick: int, timestamp: int, payload: Payload) -> None:
        """Store ``payload`` as the sample for ``tick``.

        Rewriting the newest tick replaces its sample.

        Raises:
            ValueError: If ``tick`` is older than the newest write.
        """
        with self._lock:
            last = self._last_tick
            if last is not None and tick < last:
                msg = f"tick {tick} is older than the newest write ({last})"
                raise ValueError(msg)

            if last is None:
                first_gap = tick - self._capacity + 1 if self._backfill else tick
            else:
                first_gap = max(last + 1, tick - self._capacity + 1)

            for gap in range(first_gap, tick):
                stamp = timestamp - (tick - gap) * self._interval
                self._slots[gap % self._capacity] = Sample(stamp, self._zero)

            self._slots[tick % self._capacity] = Sample(timestamp, payload)
            self._last_tick = tick

    def read(self) -> tuple[Sample, ...]:
        """Live samples, oldest first."""
        with self._lock:
            if self._last_tick is None:
                return ()
            start = self._last_tick + 1
            ordered = (
                self._slots[(start + offset) % self._capacity]
                for offset in range(self._capacity)
            )
            return tuple(sample for sample in ordered if sample is not None)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for sample in self._slots if sample is not None)


__all__ = [
    "DEFAULT_CAPACITY",
    "DEFAULT_INTERVAL_S",
    "Payload",
    "Sample",
    "TimeSeriesBuffer",
]
