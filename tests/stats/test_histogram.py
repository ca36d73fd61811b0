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

"""Tests for the log-bucket histogram."""

from __future__ import annotations

import threading

import pytest
from hypothesis import given, strategies as st

from graphstats.stats import (
    NUM_BUCKETS,
    UNBOUNDED,
    Distribution,
    Histogram,
    bucket_index,
)

values = st.lists(st.integers(min_value=0, max_value=2_000_000), max_size=50)

# =============================================================================
# Basic operations
# =============================================================================


def test_add_returns_count_and_tracks_sum() -> None:
    histogram = Histogram()
    assert histogram.add(5) == 1
    assert histogram.add(10) == 2
    assert histogram.count == 2
    assert histogram.sum == 15
    assert histogram.buckets[bucket_index(5)] == 1


def test_add_accepts_negative_and_huge_values() -> None:
    histogram = Histogram.of(-3, 10**9)
    assert histogram.buckets[0] == 1
    assert histogram.buckets[-1] == 1
    assert histogram.count == 2


def test_add_to_bucket_leaves_sum_alone() -> None:
    histogram = Histogram()
    histogram.add_to_bucket(7)
    assert histogram.count == 1
    assert histogram.sum == 0
    assert histogram.buckets[7] == 1


def test_clear_resets_everything() -> None:
    histogram = Histogram.of(1, 2, 3)
    histogram.clear()
    assert histogram == Histogram()


def test_get_with_reset_returns_counts_then_clears() -> None:
    histogram = Histogram.of(5, 5)
    counts = histogram.get(reset=True)
    assert counts[bucket_index(5)] == 2
    assert histogram.count == 0
    assert histogram.get() == [0] * NUM_BUCKETS


def test_from_state_rejects_wrong_bucket_count() -> None:
    with pytest.raises(ValueError, match="Expected 54 buckets"):
        _ = Histogram.from_state([0, 1], 1, 1)


# =============================================================================
# Percentiles, minimum, maximum
# =============================================================================


def test_percentiles_of_four_timings() -> None:
    histogram = Histogram.of(5, 10, 15, 20)
    assert histogram.percentile(0.25) == 6
    assert histogram.percentile(0.5) == 10
    assert histogram.percentile(0.75) == 17
    assert histogram.percentile(0.9) == 23
    assert histogram.percentile(0.9999) == 23


def test_percentile_of_empty_histogram_is_zero() -> None:
    histogram = Histogram()
    assert histogram.percentile(0.5) == 0
    assert histogram.minimum == 0
    assert histogram.maximum == 0
    assert histogram.mean == 0.0


def test_percentile_zero_is_zero() -> None:
    assert Histogram.of(100, 200).percentile(0.0) == 0


def test_overflow_reports_unbounded() -> None:
    histogram = Histogram.of(5_000_000)
    assert histogram.percentile(0.5) == UNBOUNDED
    assert histogram.maximum == UNBOUNDED


def test_minimum_and_maximum_use_bucket_tops() -> None:
    histogram = Histogram.of(5, 20)
    assert histogram.minimum == 6
    assert histogram.maximum == 23
    assert histogram.mean == 12.5


# =============================================================================
# Merge, subtract and equality
# =============================================================================


def test_merge_adds_other_histogram_and_distribution() -> None:
    histogram = Histogram.of(1)
    histogram.merge(Histogram.of(2, 3))
    histogram.merge(Histogram.of(4).snapshot())
    assert histogram == Histogram.of(1, 2, 3, 4)


def test_merge_with_empty_is_noop() -> None:
    histogram = Histogram.of(1)
    histogram.merge(Histogram())
    histogram.merge(Distribution.empty())
    assert histogram == Histogram.of(1)


def test_subtract_yields_interval_delta() -> None:
    cumulative = Histogram.of(5, 10)
    earlier = cumulative.clone()
    _ = cumulative.add(15)

    delta = cumulative - earlier

    assert delta == Histogram.of(15)
    assert cumulative.count == 3


def test_subtract_self_is_empty() -> None:
    histogram = Histogram.of(3, 30, 300)
    assert histogram.subtract(histogram) == Histogram()


def test_equality_and_unhashable() -> None:
    assert Histogram.of(1, 2) == Histogram.of(2, 1)
    assert Histogram.of(1) != Histogram.of(2)
    assert Histogram() != object()
    with pytest.raises(TypeError):
        _ = hash(Histogram())


def test_repr_lists_counts_by_bound() -> None:
    text = repr(Histogram.of(1))
    assert text.startswith("<Histogram count=1 sum=1 ")
    assert "2=1" in text
    assert text.endswith("inf=0>")


def test_clone_is_independent() -> None:
    original = Histogram.of(5)
    copy = original.clone()
    _ = copy.add(6)
    assert original.count == 1
    assert copy.count == 2


# =============================================================================
# Properties
# =============================================================================


@given(values)
def test_bucket_total_matches_count(observations: list[int]) -> None:
    histogram = Histogram.of(*observations)
    assert sum(histogram.buckets) == histogram.count == len(observations)
    assert histogram.sum == sum(observations)


@given(values, values)
def test_merge_sums_counts(a: list[int], b: list[int]) -> None:
    merged = Histogram.of(*a)
    merged.merge(Histogram.of(*b))
    assert merged.count == len(a) + len(b)
    assert merged.sum == sum(a) + sum(b)
    assert sum(merged.buckets) == merged.count


@given(values, values)
def test_subtract_inverts_merge(a: list[int], b: list[int]) -> None:
    base = Histogram.of(*a)
    combined = base.clone()
    combined.merge(Histogram.of(*b))
    assert combined - base == Histogram.of(*b)


@given(values, st.floats(min_value=0.0, max_value=1.0))
def test_percentile_never_exceeds_maximum(observations: list[int], p: float) -> None:
    histogram = Histogram.of(*observations)
    assert histogram.percentile(p) <= histogram.maximum


@given(values)
def test_percentiles_are_monotonic(observations: list[int]) -> None:
    histogram = Histogram.of(*observations)
    results = [histogram.percentile(p) for p in (0.1, 0.25, 0.5, 0.75, 0.9, 0.99)]
    assert results == sorted(results)


# =============================================================================
# Concurrency
# =============================================================================


def test_concurrent_adds_and_snapshots_stay_consistent() -> None:
    histogram = Histogram()
    errors: list[str] = []

    def writer() -> None:
        for value in range(1000):
            _ = histogram.add(value)

    def reader() -> None:
        for _ in range(200):
            snapshot = histogram.snapshot()
            if sum(snapshot.buckets) != snapshot.count:
                errors.append(repr(snapshot))

    threads = [threading.Thread(target=writer) for _ in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert histogram.count == 4000
