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

"""Translate graph queries into JSON-shaped rows."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Final

from ..stats import Distribution
from ._store import TimeSeriesStore

DEFAULT_PERCENTILES: Final[tuple[float, ...]] = (
    0.25,
    0.5,
    0.75,
    0.9,
    0.95,
    0.99,
    0.999,
    0.9999,
)
"""Quantiles reported for timing rows, in column order.

Selectors (``?p=0,2``) index into this table, so the order is part of the
response contract.
"""

type Row = list[int | float]
type RawSelection = str | Sequence[str | int] | None


def parse_selection(raw: RawSelection, size: int) -> tuple[int, ...] | None:
    """Indices selected by ``raw``, or None to select the whole table.

    ``raw`` is a comma-separated string (``"0,2"``) or a sequence of
    strings or ints. Entries that are not integers or fall outside
    ``range(size)`` are dropped; if none survive the selector is ignored.
    """
    if raw is None:
        return None
    parts = raw.split(",") if isinstance(raw, str) else raw

    selected: list[int] = []
    for part in parts:
        try:
            index = int(str(part).strip())
        except ValueError:
            continue
        if 0 <= index < size:
            selected.append(index)
    return tuple(selected) or None


class QueryAdapter:
    """Read-only view of a :class:`TimeSeriesStore` for graphing clients.

    Scalar series render as ``[timestamp, delta]`` rows. Timing series
    render as ``[timestamp, count, p(i0), p(i1), ...]`` with percentiles
    computed from the stored histogram delta at request time.

    Args:
        store: Store to read from.
        percentiles: Default quantile table; selectors index into it.
    """

    def __init__(
        self,
        store: TimeSeriesStore,
        *,
        percentiles: Sequence[float] = DEFAULT_PERCENTILES,
    ) -> None:
        super().__init__()
        self._store = store
        self._percentiles = tuple(percentiles)

    @property
    def percentiles(self) -> tuple[float, ...]:
        return self._percentiles

    def list_keys(self) -> list[str]:
        return sorted(self._store.keys())

    def query(self, key: str, selection: Sequence[int] | None = None) -> list[Row]:
        """Rows for ``key``, oldest first. Unknown keys yield no rows."""
        fractions = self._fractions(selection)
        return [
            _render_row(sample.timestamp, sample.payload, fractions)
            for sample in self._store.read(key)
        ]

    def keys_payload(self) -> dict[str, list[str]]:
        return {"keys": self.list_keys()}

    def graph_data(
        self, key: str, raw_selection: RawSelection = None
    ) -> dict[str, list[Row]]:
        """``{key: rows}`` for a possibly malformed selector."""
        selection = parse_selection(raw_selection, len(self._percentiles))
        return {key: self.query(key, selection)}

    def render(self, key: str, raw_selection: RawSelection = None) -> str:
        """:meth:`graph_data` encoded as JSON text."""
        return json.dumps(self.graph_data(key, raw_selection))

    def _fractions(self, selection: Sequence[int] | None) -> tuple[float, ...]:
        if selection is None:
            return self._percentiles
        size = len(self._percentiles)
        return tuple(self._percentiles[i] for i in selection if 0 <= i < size)


def _render_row(
    timestamp: int, payload: int | float | Distribution, fractions: tuple[float, ...]
) -> Row:
    if isinstance(payload, Distribution):
        return [timestamp, payload.count, *(payload.percentile(p) for p in fractions)]
    return [timestamp, payload]


__all__ = [
    "DEFAULT_PERCENTILES",
    "QueryAdapter",
    "RawSelection",
    "Row",
    "parse_selection",
]
