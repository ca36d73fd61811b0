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

"""Tests for the per-metric circular buffer."""

from __future__ import annotations

import threading

import pytest

from graphstats.timeseries import Sample, TimeSeriesBuffer

T0 = 1_000_000


def test_empty_buffer_reads_nothing() -> None:
    buffer = TimeSeriesBuffer()
    assert buffer.read() == ()
    assert buffer.last_tick is None
    assert len(buffer) == 0


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError, match="capacity"):
        _ = TimeSeriesBuffer(capacity=0)


def test_first_write_backfills_to_capacity() -> None:
    buffer = TimeSeriesBuffer(capacity=5, interval=60)
    buffer.write(0, T0, 7)

    assert buffer.read() == (
        Sample(T0 - 240, 0),
        Sample(T0 - 180, 0),
        Sample(T0 - 120, 0),
        Sample(T0 - 60, 0),
        Sample(T0, 7),
    )


def test_without_backfill_only_written_samples_are_live() -> None:
    buffer = TimeSeriesBuffer(capacity=5, backfill=False)
    buffer.write(0, T0, 1)
    buffer.write(1, T0 + 60, 2)

    assert [sample.payload for sample in buffer.read()] == [1, 2]
    assert len(buffer) == 2


def test_sixty_first_write_overwrites_oldest() -> None:
    buffer = TimeSeriesBuffer(capacity=60, backfill=False)
    for tick in range(61):
        buffer.write(tick, T0 + tick, tick)

    samples = buffer.read()
    assert len(samples) == 60
    assert samples[0].payload == 1
    assert samples[-1].payload == 60


def test_read_is_oldest_first_after_wrapping() -> None:
    buffer = TimeSeriesBuffer(capacity=3)
    for tick in range(7):
        buffer.write(tick, T0 + 60 * tick, tick * 10)

    assert [sample.payload for sample in buffer.read()] == [40, 50, 60]
    assert [sample.timestamp for sample in buffer.read()] == [
        T0 + 240,
        T0 + 300,
        T0 + 360,
    ]


def test_skipped_ticks_are_zero_filled() -> None:
    buffer = TimeSeriesBuffer(capacity=4, interval=60, backfill=False)
    buffer.write(0, T0, 5)
    buffer.write(3, T0 + 180, 9)

    assert buffer.read() == (
        Sample(T0, 5),
        Sample(T0 + 60, 0),
        Sample(T0 + 120, 0),
        Sample(T0 + 180, 9),
    )


def test_rewriting_newest_tick_replaces_sample() -> None:
    buffer = TimeSeriesBuffer(capacity=3, backfill=False)
    buffer.write(0, T0, 1)
    buffer.write(0, T0, 2)
    assert buffer.read() == (Sample(T0, 2),)


def test_writing_an_older_tick_is_rejected() -> None:
    buffer = TimeSeriesBuffer(capacity=3)
    buffer.write(5, T0, 1)
    with pytest.raises(ValueError, match="older than the newest write"):
        buffer.write(4, T0 - 60, 1)


def test_concurrent_reads_see_whole_rows() -> None:
    buffer = TimeSeriesBuffer(capacity=10)
    errors: list[str] = []
    done = threading.Event()

    def writer() -> None:
        for tick in range(500):
            buffer.write(tick, T0 + tick, tick)
        done.set()

    def reader() -> None:
        while not done.is_set():
            samples = buffer.read()
            if len(samples) != 10:
                errors.append(f"saw {len(samples)} samples")
            timestamps = [sample.timestamp for sample in samples]
            if timestamps != sorted(timestamps):
                errors.append(f"out of order: {timestamps}")

    writer_thread = threading.Thread(target=writer)
    reader_thread = threading.Thread(target=reader)
    buffer.write(0, T0, 0)
    reader_thread.start()
    writer_thread.start()
    writer_thread.join()
    reader_thread.join()

    assert errors == []
