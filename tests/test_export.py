"""Tests for the cook log CSV export."""

from datetime import date

import pytest

from core.smokewatch.export import export_csv, export_filename, read_cook_log

from conftest import make_sample


@pytest.fixture
def history():
    return [
        make_sample(seconds=0, pit=221.04, meat=150.06, fan=10),
        make_sample(seconds=3, pit=223.46, meat=150.12, fan=20),
        make_sample(seconds=6, pit=224.93, meat=150.31, fan=30),
    ]


class TestExportCsv:

    def test_header_and_one_row_per_sample(self, history):
        lines = export_csv(history, current_fan_duty=42).splitlines()

        assert len(lines) == 4
        assert lines[0] == "Timestamp,Pit Temp,Meat 1 Temp,Fan Speed"

    def test_rows_use_current_fan_duty(self, history):
        lines = export_csv(history, current_fan_duty=42).splitlines()

        assert [line.split(",")[3] for line in lines[1:]] == ["42", "42", "42"]

    def test_per_sample_fan_duty(self, history):
        lines = export_csv(history, current_fan_duty=None).splitlines()

        assert [line.split(",")[3] for line in lines[1:]] == ["10", "20", "30"]

    def test_row_format(self, history):
        row = export_csv(history, current_fan_duty=0).splitlines()[1]

        assert row == "2024-05-04T14:00:00.000Z,221.0,150.1,0"

    def test_sample_without_probe_leaves_cell_empty(self):
        row = export_csv([make_sample(meat=None, pit=225.0)], current_fan_duty=5).splitlines()[1]

        assert row.split(",")[1:] == ["225.0", "", "5"]

    def test_empty_history_is_header_only(self):
        assert export_csv([], current_fan_duty=0) == "Timestamp,Pit Temp,Meat 1 Temp,Fan Speed\n"

    def test_round_trip(self, history):
        rows = read_cook_log(export_csv(history, current_fan_duty=42))

        assert len(rows) == len(history)
        for row, sample in zip(rows, history):
            assert row["timestamp"] == sample.timestamp
            assert row["pit"] == pytest.approx(sample.pit, abs=0.05)
            assert row["meat"] == pytest.approx(sample.primary_probe.temperature, abs=0.05)
            assert row["fan"] == 42


def test_export_filename():
    assert export_filename(date(2024, 5, 4)) == "cook_log_2024-05-04.csv"
