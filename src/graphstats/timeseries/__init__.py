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

"""Retained per-tick deltas of cumulative metrics.

:class:`TimeSeriesStore` keeps one :class:`TimeSeriesBuffer` per metric key
(60 samples by default) and the baseline needed to turn the next cumulative
reading into a delta. :class:`QueryAdapter` renders buffers as rows for the
``/graph_data`` endpoints.
"""

from __future__ import annotations

from ._buffer import (
    DEFAULT_CAPACITY,
    DEFAULT_INTERVAL_S,
    Payload,
    Sample,
    TimeSeriesBuffer,
)
from ._query import (
    DEFAULT_PERCENTILES,
    QueryAdapter,
    RawSelection,
    Row,
    parse_selection,
)
from ._store import Cumulative, TimeSeriesStore

__all__ = [
    "DEFAULT_CAPACITY",
    "DEFAULT_INTERVAL_S",
    "DEFAULT_PERCENTILES",
    "Cumulative",
    "Payload",
    "QueryAdapter",
    "RawSelection",
    "Row",
    "Sample",
    "TimeSeriesBuffer",
    "TimeSeriesStore",
    "parse_selection",
]
