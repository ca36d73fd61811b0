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

"""Controllable time sources for the sampler and timing helpers.

Two time domains are used:

- **Monotonic time** (float seconds): measures elapsed time, for example
  the duration recorded by ``InMemoryStats.time``.

- **Wall-clock time** (UTC datetime): stamps each sampling round. Series
  timestamps are whole seconds since the epoch, see :func:`epoch_seconds`.

Example (testing)::

    from graphstats.clock import FakeClock, epoch_seconds

    clock = FakeClock()
    before = epoch_seconds(clock)
    clock.advance(60)
    assert epoch_seconds(clock) - before == 60
"""

from __future__ import annotations

import threading
import time as _time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Final, Protocol, runtime_checkable


@runtime_checkable
class MonotonicClock(Protocol):
    """Protocol for monotonic time measurement.

    The zero point is arbitrary and unrelated to wall-clock time.
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...


@runtime_checkable
class WallClock(Protocol):
    """Protocol for wall-clock time.

    Wall clocks can jump (NTP adjustments) and must not be used to
    measure durations.
    """

    def utcnow(self) -> datetime:
        """Return current UTC datetime (timezone-aware)."""
        ...


@runtime_checkable
class Clock(MonotonicClock, WallClock, Protocol):
    """Unified clock combining monotonic and wall-clock time."""

    pass


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Production clock backed by ``time.monotonic`` and ``datetime.now``."""

    def monotonic(self) -> float:
        """Return monotonic time from time.monotonic()."""
        return _time.monotonic()

    def utcnow(self) -> datetime:
        """Return current UTC datetime."""
        return datetime.now(UTC)


SYSTEM_CLOCK: Final[Clock] = SystemClock()
"""Default clock instance; tests inject :class:`FakeClock` instead."""


@dataclass
class FakeClock:
    """Controllable clock for deterministic testing.

    Monotonic and wall-clock time stay frozen until :meth:`advance` moves
    both forward together. All operations are thread-safe.
    """

    _monotonic: float = 0.0
    _wall: datetime = field(default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def monotonic(self) -> float:
        """Return current monotonic time."""
        with self._lock:
            return self._monotonic

    def utcnow(self) -> datetime:
        """Return current wall-clock time."""
        with self._lock:
            return self._wall

    def advance(self, seconds: float) -> None:
        """Advance both clocks by the given duration.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            msg = "Cannot advance time by negative seconds"
            raise ValueError(msg)
        with self._lock:
            self._monotonic += seconds
            self._wall += timedelta(seconds=seconds)

    def set_wall(self, value: datetime) -> None:
        """Set wall-clock time to an absolute, timezone-aware value."""
        if value.tzinfo is None:
            msg = "Wall clock time must be timezone-aware"
            raise ValueError(msg)
        with self._lock:
            self._wall = value


def epoch_seconds(clock: WallClock) -> int:
    """Whole seconds since the Unix epoch according to ``clock``."""
    return int(clock.utcnow().timestamp())


__all__ = [
    "SYSTEM_CLOCK",
    "Clock",
    "FakeClock",
    "MonotonicClock",
    "SystemClock",
    "WallClock",
    "epoch_seconds",
]
