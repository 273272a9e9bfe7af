"""Tests for the fixed-capacity history buffer."""

import pytest

from core.smokewatch.exceptions import ConfigurationError
from core.smokewatch.history import HistoryBuffer

from conftest import make_sample


class TestHistoryBuffer:

    def test_append_keeps_insertion_order(self):
        buffer = HistoryBuffer(capacity=5)
        samples = [make_sample(seconds=i) for i in range(3)]
        for s in samples:
            buffer.append(s)

        assert buffer.snapshot() == samples
        assert len(buffer) == 3
        assert buffer.latest() is samples[-1]

    def test_overflow_evicts_oldest_first(self):
        capacity, extra = 10, 7
        buffer = HistoryBuffer(capacity=capacity)
        samples = [make_sample(seconds=i) for i in range(capacity + extra)]
        for s in samples:
            buffer.append(s)

        assert len(buffer) == capacity
        assert buffer.snapshot() == samples[-capacity:]

    def test_default_capacity_is_100(self):
        buffer = HistoryBuffer()
        for i in range(150):
            buffer.append(make_sample(seconds=i))

        assert buffer.capacity == 100
        assert len(buffer) == 100
        assert buffer.snapshot()[0].timestamp == make_sample(seconds=50).timestamp

    def test_snapshot_is_not_affected_by_later_appends(self):
        buffer = HistoryBuffer(capacity=2)
        buffer.append(make_sample(seconds=0))
        snap = buffer.snapshot()
        buffer.append(make_sample(seconds=1))
        buffer.append(make_sample(seconds=2))

        assert len(snap) == 1
        assert snap[0].timestamp == make_sample(seconds=0).timestamp

    def test_out_of_order_samples_are_accepted(self):
        buffer = HistoryBuffer(capacity=3)
        buffer.append(make_sample(seconds=10))
        buffer.append(make_sample(seconds=5))

        assert [s.timestamp for s in buffer.snapshot()] == [
            make_sample(seconds=10).timestamp,
            make_sample(seconds=5).timestamp,
        ]

    def test_clear_and_empty_latest(self):
        buffer = HistoryBuffer(capacity=3)
        buffer.append(make_sample())
        buffer.clear()

        assert len(buffer) == 0
        assert buffer.latest() is None

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity_rejected(self, capacity):
        with pytest.raises(ConfigurationError):
            HistoryBuffer(capacity=capacity)
