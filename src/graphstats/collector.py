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

"""One-stop wiring of store, sampler and query adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .clock import SYSTEM_CLOCK, Clock
from .config import CollectorConfig
from .runtime import PeriodicSampler, StructuredLogger, get_logger
from .stats import StatsSource
from .timeseries import QueryAdapter, RawSelection, TimeSeriesStore

if TYPE_CHECKING:
    from fastapi import FastAPI


class TimeSeriesCollector:
    """Keeps the last hour (by default) of every metric in ``source``.

    Example::

        stats = InMemoryStats()
        collector = TimeSeriesCollector(stats, CollectorConfig.from_env())
        collector.start()
        app = collector.app()   # serve /graph_data with uvicorn

        # On shutdown
        collector.shutdown()

    Args:
        source: Registry holding the cumulative metrics.
        config: Settings; defaults to :class:`CollectorConfig` defaults.
        clock: Clock for round timestamps.
        logger: Optional structured logger override.
    """

    def __init__(
        self,
        source: StatsSource,
        config: CollectorConfig | None = None,
        *,
        clock: Clock = SYSTEM_CLOCK,
        logger: StructuredLogger | None = None,
    ) -> None:
        super().__init__()
        self._source = source
        self._config = config or CollectorConfig()
        self._logger = logger or get_logger(__name__)
        self._store = TimeSeriesStore(
            capacity=self._config.capacity,
            interval=self._config.interval_seconds,
            backfill=self._config.backfill,
            logger=self._logger,
        )
        self._sampler = PeriodicSampler(
            source,
            self._store,
            interval=self._config.interval,
            clock=clock,
            logger=self._logger,
        )
        self._adapter = QueryAdapter(self._store, percentiles=self._config.percentiles)

    @property
    def config(self) -> CollectorConfig:
        return self._config

    @property
    def store(self) -> TimeSeriesStore:
        return self._store

    @property
    def sampler(self) -> PeriodicSampler:
        return self._sampler

    @property
    def adapter(self) -> QueryAdapter:
        return self._adapter

    def start(self) -> None:
        self._sampler.start()

    def shutdown(self) -> None:
        self._sampler.stop()

    def get(self, key: str, raw_selection: RawSelection = None) -> str:
        """JSON text of ``key``'s rows, as served by ``/graph_data/<key>``."""
        return self._adapter.render(key, raw_selection)

    def app(self) -> FastAPI:
        """FastAPI app serving this collector's graph data and stats."""
        from .admin import build_graph_app

        return build_graph_app(self._adapter, source=self._source, logger=self._logger)


__all__ = ["TimeSeriesCollector"]
