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

"""Approximate histograms and the metrics registry contract.

Quick Start::

    from graphstats.stats import Histogram, InMemoryStats

    latency = Histogram.of(5, 10, 15, 20)
    latency.percentile(0.9)   # 23
    snapshot = latency.snapshot()

    stats = InMemoryStats()
    stats.incr("requests")
    stats.add_timing("request_ms", 42)

Bucket Table
------------

All histograms share :data:`BUCKET_OFFSETS`, 53 exclusive upper bounds
growing by roughly 1.3x, plus one overflow bucket. Percentiles report the
inclusive top of the bucket they land in, or :data:`UNBOUNDED` for the
overflow bucket.
"""

from __future__ import annotations

from ._buckets import BUCKET_OFFSETS, NUM_BUCKETS, UNBOUNDED, bucket_index
from ._distribution import Distribution, percentile_label
from ._histogram import Histogram
from ._registry import InMemoryStats, MetricKind, StatsSource, metric_key, parse_key

__all__ = [
    "BUCKET_OFFSETS",
    "NUM_BUCKETS",
    "UNBOUNDED",
    "Distribution",
    "Histogram",
    "InMemoryStats",
    "MetricKind",
    "StatsSource",
    "bucket_index",
    "metric_key",
    "parse_key",
    "percentile_label",
]
