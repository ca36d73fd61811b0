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

from __future__ import annotations

import pytest

from graphstats.clock import FakeClock
from graphstats.runtime import PeriodicSampler
from graphstats.stats import InMemoryStats
from graphstats.timeseries import QueryAdapter, TimeSeriesStore

EPOCH_START = 1_704_067_200
"""``epoch_seconds`` of a fresh :class:`FakeClock` (2024-01-01T00:00:00Z)."""


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stats(clock: FakeClock) -> InMemoryStats:
    return InMemoryStats(clock=clock)


@pytest.fixture
def store() -> TimeSeriesStore:
    return TimeSeriesStore()


@pytest.fixture
def sampler(
    stats: InMemoryStats, store: TimeSeriesStore, clock: FakeClock
) -> PeriodicSampler:
    return PeriodicSampler(stats, store, interval=60.0, clock=clock)


@pytest.fixture
def adapter(store: TimeSeriesStore) -> QueryAdapter:
    return QueryAdapter(store)
