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

"""Periodic sampling of cumulative metrics into time series.

Example::

    from graphstats.runtime import PeriodicSampler
    from graphstats.stats import InMemoryStats
    from graphstats.timeseries import TimeSeriesStore

    stats = InMemoryStats()
    store = TimeSeriesStore()
    sampler = PeriodicSampler(stats, store, interval=60.0)
    sampler.start()

    # Later
    sampler.stop()
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING

from ..clock import SYSTEM_CLOCK, Clock, epoch_seconds
from ..stats import MetricKind, StatsSource, parse_key
from .logging import StructuredLogger, get_logger

if TYPE_CHECKING:
    from ..timeseries import Cumulative, TimeSeriesStore


class SamplerState(Enum):
    IDLE = "idle"
    SAMPLING = "sampling"


class PeriodicSampler:
    """Runs one sampling round per interval on a daemon thread.

    Each round reads every key's cumulative value from ``source``, turns
    it into a delta against the store's baseline and records it. Rounds
    never overlap: a round that overruns the next deadline delays that
    round instead of dropping it, and the schedule restarts from there.

    A key whose read or delta fails is logged and left out of that round only.

    Args:
        source: Registry to read cumulative values from.
        store: Store receiving the deltas.
        interval: Seconds between rounds.
        clock: Clock for round timestamps and deadlines.
        logger: Optional structured logger override.
    """

    def __init__(
        self,
        source: StatsSource,
        store: TimeSeriesStore,
        *,
        interval: float = 60.0,
        clock: Clock = SYSTEM_CLOCK,
        logger: StructuredLogger | None = None,
    ) -> None:
        super().__init__()
        if interval <= 0:
            msg = "interval must be positive"
            raise ValueError(msg)
        self._source = source
        self._store = store
        self._interval = interval
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self._state = SamplerState.IDLE
        self._round_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> int:
        """Run one sampling round now and return the number of keys recorded."""
        with self._round_lock:
            self._state = SamplerState.SAMPLING
            try:
                return self._sample_round()
            finally:
                self._state = SamplerState.IDLE

    def start(self) -> None:
        """Start the sampling thread; the first round runs one interval from now."""
        if self._thread is not None:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="graphstats-sampler",
            daemon=True,
        )
        self._thread.start()
        self._logger.info(
            "Sampler started.",
            event="sampler.start",
            context={"interval": self._interval},
        )

    def stop(self) -> None:
        """Stop the sampling thread, waiting for an in-flight round."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self._interval * 2)
            self._thread = None
            self._logger.info("Sampler stopped.", event="sampler.stop")

    def _run(self) -> None:
        deadline = self._clock.monotonic() + self._interval
        while not self._stop_event.wait(
            timeout=max(0.0, deadline - self._clock.monotonic())
        ):
            try:
                _ = self.tick()
            except Exception:
                self._logger.exception(
                    "Sampling round failed.", event="sampler.round.failed"
                )
            deadline = max(deadline + self._interval, self._clock.monotonic())

    def _sample_round(self) -> int:
        timestamp = epoch_seconds(self._clock)
        tick = self._store.start_round(timestamp)
        recorded = 0
        for key in sorted(self._source.all_keys()):
            try:
                current = self._read(key)
                self._store.record_tick(key, timestamp, self._store.delta(key, current))
            except Exception:
                self._logger.exception(
                    "Metric sampling failed; skipping it this round.",
                    event="sampler.read.failed",
                    context={"key": key, "tick": tick},
                )
                continue
            recorded += 1

        self._logger.debug(
            "Sampling round complete.",
            event="sampler.round.complete",
            context={"tick": tick, "timestamp": timestamp, "recorded": recorded},
        )
        return recorded

    def _read(self, key: str) -> Cumulative:
        kind, _ = parse_key(key)
        if kind is MetricKind.TIMING:
            return self._source.current_histogram(key)
        return self._source.current_value(key)


__all__ = ["PeriodicSampler", "SamplerState"]
