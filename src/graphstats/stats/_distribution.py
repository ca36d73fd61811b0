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

"""Immutable point-in-time view of a histogram."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..dataclasses import FrozenDataclass
from ._buckets import (
    NUM_BUCKETS,
    maximum_of,
    mean_of,
    minimum_of,
    percentile_of,
)

if TYPE_CHECKING:
    from ._histogram import Histogram


@FrozenDataclass()
class Distribution:
    """Snapshot of a :class:`Histogram`'s buckets, count and sum.

    Safe to hand to readers while the source histogram keeps changing.

    Attributes:
        buckets: Counts per bucket, overflow bucket last.
        count: Total number of observations.
        sum: Sum of all observed values.
    """

    buckets: tuple[int, ...]
    count: int
    sum: int

    @classmethod
    def empty(cls) -> Distribution:
        """Distribution with no observations."""
        return cls(buckets=(0,) * NUM_BUCKETS, count=0, sum=0)

    def percentile(self, p: float) -> int:
        """Approximate quantile ``p``; see :func:`percentile_of`."""
        return percentile_of(self.buckets, self.count, p)

    @property
    def minimum(self) -> int:
        return minimum_of(self.buckets, self.count)

    @property
    def maximum(self) -> int:
        return maximum_of(self.buckets, self.count)

    @property
    def mean(self) -> float:
        return mean_of(self.count, self.sum)

    def to_histogram(self) -> Histogram:
        """Mutable copy of this snapshot."""
        from ._histogram import Histogram

        return Histogram.from_state(self.buckets, self.count, self.sum)

    def summary(self, percentiles: Sequence[float]) -> dict[str, int | float]:
        """Flat mapping of the headline numbers, keyed for JSON output.

        Percentile keys drop the leading ``0.``: 0.5 becomes ``p50`` and
        0.9999 becomes ``p9999``.
        """
        summary: dict[str, int | float] = {
            "count": self.count,
            "sum": self.sum,
            "average": self.mean,
            "minimum": self.minimum,
            "maximum": self.maximum,
        }
        for p in percentiles:
            summary[percentile_label(p)] = self.percentile(p)
        return summary


def percentile_label(p: float) -> str:
    """``p25`` style label for a quantile fraction."""
    digits = f"{p * 100:.2f}".rstrip("0").rstrip(".").replace(".", "")
    return f"p{digits}"


__all__ = ["Distribution", "percentile_label"]
