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

"""Tests for the shared bucket table and bucket lookup."""

from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from graphstats.stats import BUCKET_OFFSETS, NUM_BUCKETS, UNBOUNDED, bucket_index
from graphstats.stats._buckets import (
    maximum_of,
    mean_of,
    minimum_of,
    percentile_of,
)


def test_table_has_53_strictly_increasing_positive_bounds() -> None:
    assert len(BUCKET_OFFSETS) == 53
    assert NUM_BUCKETS == 54
    assert BUCKET_OFFSETS[0] > 0
    assert all(a < b for a, b in zip(BUCKET_OFFSETS, BUCKET_OFFSETS[1:], strict=False))


def test_table_grows_by_roughly_thirty_percent() -> None:
    """Beyond the small integers each bound is about 1.3x the previous one."""
    pairs = zip(BUCKET_OFFSETS[10:], BUCKET_OFFSETS[11:], strict=False)
    for previous, current in pairs:
        assert 1.2 < current / previous < 1.4


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-5, 0),
        (0, 0),
        (1, 1),
        (2, 2),
        (5, 5),
        (6, 5),
        (10, 7),
        (15, 9),
        (20, 10),
        (1422135, 52),
        (1422136, 53),
        (10**12, 53),
    ],
)
def test_bucket_index_known_values(value: int, expected: int) -> None:
    assert bucket_index(value) == expected


def test_bucket_index_treats_offsets_as_exclusive_maxima() -> None:
    for index, bound in enumerate(BUCKET_OFFSETS):
        assert bucket_index(bound) == index + 1
        assert bucket_index(bound - 1) == index


@given(st.integers(min_value=-10, max_value=3_000_000))
def test_bucket_index_places_value_inside_its_bucket(value: int) -> None:
    index = bucket_index(value)
    assert 0 <= index < NUM_BUCKETS
    if index < len(BUCKET_OFFSETS):
        assert value < BUCKET_OFFSETS[index]
    if index > 0:
        assert value >= BUCKET_OFFSETS[index - 1]


@given(st.integers(), st.integers())
def test_bucket_index_is_monotonic(a: int, b: int) -> None:
    low, high = sorted((a, b))
    assert bucket_index(low) <= bucket_index(high)


def test_percentile_of_empty_array_is_zero() -> None:
    assert percentile_of([0] * NUM_BUCKETS, 0, 0.5) == 0


def test_percentile_of_overflow_is_unbounded() -> None:
    buckets = [0] * NUM_BUCKETS
    buckets[-1] = 1
    assert percentile_of(buckets, 1, 0.5) == UNBOUNDED


def test_percentile_of_above_one_stops_at_the_end() -> None:
    buckets = [0] * NUM_BUCKETS
    buckets[3] = 2
    assert percentile_of(buckets, 2, 1.5) == UNBOUNDED


def test_minimum_ignores_overflow_only_histograms() -> None:
    buckets = [0] * NUM_BUCKETS
    buckets[-1] = 3
    assert minimum_of(buckets, 3) == 0
    assert maximum_of(buckets, 3) == UNBOUNDED


def test_mean_of_empty_is_zero() -> None:
    assert mean_of(0, 0) == 0.0
    assert mean_of(4, 50) == 12.5
