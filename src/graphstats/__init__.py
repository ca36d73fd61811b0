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

"""Bounded-memory histograms and per-metric time series for live stats.

The admin app lives in :mod:`graphstats.admin` and is imported on demand so
the core stays usable without the web stack loaded.
"""

from __future__ import annotations

from . import clock, errors, runtime, stats, timeseries
from .collector import TimeSeriesCollector
from .config import CollectorConfig
from .errors import ConfigError, GraphstatsError, MetricKindError, MetricNotFoundError
from .stats import Distribution, Histogram, InMemoryStats, MetricKind
from .timeseries import QueryAdapter, TimeSeriesBuffer, TimeSeriesStore

__all__ = [
    "CollectorConfig",
    "ConfigError",
    "Distribution",
    "GraphstatsError",
    "Histogram",
    "InMemoryStats",
    "MetricKind",
    "MetricKindError",
    "MetricNotFoundError",
    "QueryAdapter",
    "TimeSeriesBuffer",
    "TimeSeriesCollector",
    "TimeSeriesStore",
    "clock",
    "errors",
    "runtime",
    "stats",
    "timeseries",
]
