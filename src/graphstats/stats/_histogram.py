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

"""Logarithmic-bucket histogram with fixed memory."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Self

from ._buckets import (
    BUCKET_OFFSETS,
    NUM_BUCKETS,
    bucket_index,
    maximum_of,
    mean_of,
    minimum_of,
    percentile_of,
)
from ._distribution import Distribution


class Histogram:
    """Approximate distribution of integer observations.

    Observations are counted in :data:`NUM_BUCKETS` exponentially widening
    buckets, so memory stays fixed and percentiles are approximate. Every
    method takes the instance lock, so writers and :meth:`snapshot` readers
    on other threads never see a half-applied update.

    Example::

        latency = Histogram.of(5, 10, 15, 20)
        latency.add(250)
        latency.percentile(0.5)  # 17
        latency.snapshot()       # immutable Distribution

    Two histograms are equal when count, sum and every bucket match.
    Subtraction assumes ``other`` is an earlier snapshot of the same
    cumulative histogram; anything else yields negative counts silently.
    """

    __slots__ = ("_buckets", "_count", "_lock", "_sum")

    def __init__(self) -> None:
        super().__init__()
        self._buckets = [0] * NUM_BUCKETS
        self._count = 0
        self._sum = 0
        self._lock = threading.Lock()

    @classmethod
    def of(cls, *values: int) -> Self:
        """Histogram holding ``values``."""
        histogram = cls()
        for value in values:
            _ = histogram.add(value)
        return histogram

    @classmethod
    def from_state(cls, buckets: Sequence[int], count: int, total: int) -> Self:
        """Histogram with the given raw state, copied."""
        if len(buckets) != NUM_BUCKETS:
            msg = f"Expected {NUM_BUCKETS} buckets, got {len(buckets)}"
            raise ValueError(msg)
        histogram = cls()
        histogram._buckets = list(buckets)
        histogram._count = count
        histogram._sum = total
        return histogram

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def sum(self) -> int:
        with self._lock:
            return self._sum

    @property
    def buckets(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(self._buckets)

    def add(self, value: int) -> int:
        """Record one observation and return the new count."""
        index = bucket_index(value)
        with self._lock:
            self._buckets[index] += 1
            self._count += 1
            self._sum += value
            return self._count

    def add_to_bucket(self, index: int) -> None:
        """Count one observation directly into bucket ``index``.

        ``sum`` is left alone; callers keeping a separate sum must keep it
        consistent themselves. ``index`` should come from :func:`bucket_index`.
        """
        with self._lock:
            self._buckets[index] += 1
            self._count += 1

    def clear(self) -> None:
        with self._lock:
            self._reset()

    def get(self, *, reset: bool = False) -> list[int]:
        """Bucket counts, optionally clearing the histogram afterwards."""
        with self._lock:
            counts = list(self._buckets)
            if reset:
                self._reset()
            return counts

    def merge(self, other: Histogram | Distribution) -> None:
        """Add ``other``'s observations into this histogram."""
        buckets, count, total = _state_of(other)
        if count <= 0:
            return
        with self._lock:
            for index, n in enumerate(buckets):
                self._buckets[index] += n
            self._count += count
            self._sum += total

    def subtract(self, other: Histogram | Distribution) -> Histogram:
        """New histogram holding the observations added since ``other``."""
        mine, count, total = _state_of(self)
        theirs, other_count, other_total = _state_of(other)
        return Histogram.from_state(
            [a - b for a, b in zip(mine, theirs, strict=True)],
            count - other_count,
            total - other_total,
        )

    def __sub__(self, other: Histogram | Distribution) -> Histogram:
        return self.subtract(other)

    def percentile(self, p: float) -> int:
        """Approximate quantile ``p`` (a fraction in ``[0, 1]``).

        Returns the highest value guaranteed not to exceed the true
        percentile, 0 for an empty histogram and ``UNBOUNDED`` when the
        quantile lands in the overflow bucket.
        """
        with self._lock:
            return percentile_of(self._buckets, self._count, p)

    @property
    def minimum(self) -> int:
        with self._lock:
            return minimum_of(self._buckets, self._count)

    @property
    def maximum(self) -> int:
        with self._lock:
            return maximum_of(self._buckets, self._count)

    @property
    def mean(self) -> float:
        with self._lock:
            return mean_of(self._count, self._sum)

    def snapshot(self) -> Distribution:
        """Immutable copy of the current state, taken under the lock."""
        with self._lock:
            return Distribution(
                buckets=tuple(self._buckets), count=self._count, sum=self._sum
            )

    def clone(self) -> Histogram:
        histogram = Histogram()
        histogram.merge(self)
        return histogram

    def _reset(self) -> None:
        self._buckets = [0] * NUM_BUCKETS
        self._count = 0
        self._sum = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return _state_of(self) == _state_of(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        buckets, count, total = _state_of(self)
        labels = [str(bound) for bound in BUCKET_OFFSETS] + ["inf"]
        pairs = ", ".join(
            f"{label}={n}" for label, n in zip(labels, buckets, strict=True)
        )
        return f"<Histogram count={count} sum={total} {pairs}>"


def _state_of(
    source: Histogram | Distribution,
) -> tuple[tuple[int, ...], int, int]:
    if isinstance(source, Distribution):
        return source.buckets, source.count, source.sum
    snapshot = source.snapshot()
    return snapshot.buckets, snapshot.count, snapshot.sum


__all__ = ["Histogram"]
