"""
Trailing moving average used to denoise probe readings before trend fitting.
"""

from typing import Callable, Optional, Sequence

import numpy as np

from .models import Sample, SmoothedPoint


def primary_probe_temperature(sample: Sample) -> float:
    """Temperature of the sample's first probe (NaN when it has none)."""
    probe = sample.primary_probe
    return probe.temperature if probe is not None else float("nan")


def moving_average(values: Sequence[float], window: int = 3) -> np.ndarray:
    """Trailing moving average.

    value[i] = mean(values[max(0, i - window + 1) .. i]). The window shrinks
    near the start; there is no look-ahead and no padding.

    Args:
        values: Raw series
        window: Number of trailing samples per average (values < 1 act as 1)

    Returns:
        Array with one smoothed value per input value
    """
    raw = np.asarray(values, dtype=float)
    window = max(1, int(window))

    smoothed = np.empty_like(raw)
    with np.errstate(over="ignore", invalid="ignore"):
        for i in range(len(raw)):
            smoothed[i] = raw[max(0, i - window + 1):i + 1].mean()
    return smoothed


def smooth_samples(
    samples: Sequence[Sample],
    window: int = 3,
    value: Optional[Callable[[Sample], float]] = None,
) -> list[SmoothedPoint]:
    """Smooth a sample series, preserving timestamps.

    Args:
        samples: Samples in buffer order
        window: Moving-average window
        value: Extracts the raw value from a sample (defaults to primary probe)

    Returns:
        One SmoothedPoint per sample
    """
    extract = value or primary_probe_temperature
    averaged = moving_average([extract(s) for s in samples], window)
    return [
        SmoothedPoint(timestamp=s.timestamp, value=float(v))
        for s, v in zip(samples, averaged)
    ]
