"""Shared fixtures for Smokewatch tests."""

from datetime import datetime, timedelta, timezone

import pytest

from core.smokewatch.models import Probe, Sample

START = datetime(2024, 5, 4, 14, 0, 0, tzinfo=timezone.utc)


def make_sample(
    seconds: float = 0,
    meat: float | None = 150.0,
    pit: float = 225.0,
    fan: int = 30,
    meat_target: float = 195.0,
) -> Sample:
    """Sample taken `seconds` after START."""
    probes = ()
    if meat is not None:
        probes = (Probe(id=1, name="Pork Shoulder", temperature=meat, target=meat_target),)
    return Sample(
        timestamp=START + timedelta(seconds=seconds),
        pit=pit,
        probes=probes,
        fan_duty=fan,
    )


def linear_series(count: int, start: float, slope: float, spacing: float = 5.0) -> list[Sample]:
    """Samples whose meat temperature rises by `slope` degrees per second."""
    return [
        make_sample(seconds=i * spacing, meat=start + slope * i * spacing)
        for i in range(count)
    ]


@pytest.fixture
def sample_factory():
    return make_sample
