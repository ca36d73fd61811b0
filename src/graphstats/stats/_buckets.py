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

"""Shared bucket table and the bucket-array algorithms built on it.

Bucket ``i`` holds values ``v`` with ``BUCKET_OFFSETS[i - 1] <= v <
BUCKET_OFFSETS[i]``: every offset is an exclusive maximum. The final bucket
(index ``len(BUCKET_OFFSETS)``) catches everything at or above the largest
offset.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

# 1, then int(1.3 ** n) + 1 for n in 0..54, deduplicated.
BUCKET_OFFSETS: Final[tuple[int, ...]] = (
    1, 2, 3, 4, 5, 7, 9, 11, 14, 18, 24, 31, 40, 52, 67, 87, 113, 147, 191,
    248, 322, 418, 543, 706, 918, 1193, 1551, 2016, 2620, 3406, 4428, 5757,
    7483, 9728, 12647, 16441, 21373, 27784, 36119, 46955, 61041, 79354,
    103160, 134107, 174339, 226641, 294633, 383023, 497930, 647308, 841501,
    1093951, 1422136,
)  # fmt: skip

NUM_BUCKETS: Final[int] = len(BUCKET_OFFSETS) + 1
"""Bucket count per histogram, including the overflow bucket."""

UNBOUNDED: Final[int] = 2**31 - 1
"""Sentinel for a percentile or maximum in the overflow bucket."""


def bucket_index(value: int) -> int:
    """Return the index of the bucket that holds ``value``.

    Values below the first offset land in bucket 0 and values at or above
    the last offset land in the overflow bucket. Monotonic in ``value``.
    """
    low = 0
    high = len(BUCKET_OFFSETS) - 1
    while low <= high:
        mid = (low + high + 1) >> 1
        bound = BUCKET_OFFSETS[mid]
        if bound < value:
            low = mid + 1
        elif bound > value:
            high = mid - 1
        else:
            # offsets are exclusive maxima
            return mid + 1
    return low


def percentile_of(buckets: Sequence[int], count: int, p: float) -> int:
    """Approximate the ``p`` quantile (``0 <= p <= 1``) of a bucket array.

    The answer is the inclusive upper end of the bucket where the running
    total first reaches ``p * count``: never above the true value's bucket
    maximum. Returns 0 when ``count`` is 0 or the target falls before any
    bucket, and :data:`UNBOUNDED` when it lands in the overflow bucket.
    """
    target = p * count
    total = 0
    index = 0
    while total < target and index < len(buckets):
        total += buckets[index]
        index += 1
    if index == 0:
        return 0
    if index - 1 >= len(BUCKET_OFFSETS):
        return UNBOUNDED
    return BUCKET_OFFSETS[index - 1] - 1


def maximum_of(buckets: Sequence[int], count: int) -> int:
    """Upper end of the highest populated bucket, or :data:`UNBOUNDED`."""
    if buckets[-1] > 0:
        return UNBOUNDED
    if count == 0:
        return 0
    for index in range(len(BUCKET_OFFSETS) - 1, -1, -1):
        if buckets[index] != 0:
            return BUCKET_OFFSETS[index] - 1
    return 0


def minimum_of(buckets: Sequence[int], count: int) -> int:
    """Upper end of the lowest populated finite bucket."""
    if count == 0:
        return 0
    for index in range(len(BUCKET_OFFSETS)):
        if buckets[index] != 0:
            return BUCKET_OFFSETS[index] - 1
    return 0


def mean_of(count: int, total: int) -> float:
    """Average observation, 0.0 when nothing was observed."""
    if count == 0:
        return 0.0
    return total / count


__all__ = [
    "BUCKET_OFFSETS",
    "NUM_BUCKETS",
    "UNBOUNDED",
    "bucket_index",
    "maximum_of",
    "mean_of",
    "minimum_of",
    "percentile_of",
]
