"""
Completion Predictor - projects when a probe will reach its target.

Fits an ordinary-least-squares line to the smoothed trailing window of the
history and extrapolates to the target temperature:

    slope = (n*Σxy - Σx*Σy) / (n*Σx² - (Σx)²)

with x = seconds since the first point of the window and y = smoothed
temperature. Guardrails:
- fewer than min_points samples -> UNKNOWN
- current >= target -> ALREADY_DONE
- missing readings in the window, or a degenerate regression (all
  timestamps equal) -> UNKNOWN
- non-finite slope, or slope <= stall_slope -> STALLED
- time remaining clamped to max_eta_hours

The function is pure and recomputed on every new sample.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

import numpy as np

from .models import Prediction, Sample, SmoothedPoint
from .smoothing import smooth_samples

logger = logging.getLogger(__name__)

DEFAULT_MIN_POINTS = 8
DEFAULT_REGRESSION_WINDOW = 12
DEFAULT_SMOOTH_WINDOW = 3
DEFAULT_STALL_SLOPE = 0.0005  # °/s
DEFAULT_MAX_ETA_HOURS = 48.0


def fit_slope(points: Sequence[SmoothedPoint]) -> Optional[float]:
    """Closed-form OLS slope of value vs. elapsed seconds.

    Args:
        points: Smoothed points, oldest first

    Returns:
        Slope in degrees per second (may be non-finite on overflow),
        or None if the denominator is zero
    """
    if not points:
        return None

    start = points[0].timestamp
    x = np.array([(p.timestamp - start).total_seconds() for p in points], dtype=float)
    y = np.array([p.value for p in points], dtype=float)
    n = len(points)

    with np.errstate(all="ignore"):
        sum_x = x.sum()
        sum_y = y.sum()
        sum_xy = (x * y).sum()
        sum_xx = (x * x).sum()

        denom = n * sum_xx - sum_x * sum_x
        if denom == 0:
            return None
        return float((n * sum_xy - sum_x * sum_y) / denom)


def predict_completion(
    history: Sequence[Sample],
    current_value: float,
    target_value: float,
    *,
    min_points: int = DEFAULT_MIN_POINTS,
    regression_window: int = DEFAULT_REGRESSION_WINDOW,
    smooth_window: int = DEFAULT_SMOOTH_WINDOW,
    stall_slope: float = DEFAULT_STALL_SLOPE,
    max_eta_hours: float = DEFAULT_MAX_ETA_HOURS,
    now: Optional[datetime] = None,
    value: Optional[Callable[[Sample], float]] = None,
) -> Prediction:
    """Estimate when current_value will reach target_value.

    Args:
        history: Buffered samples, oldest first
        current_value: Latest probe temperature
        target_value: Probe target temperature
        min_points: Samples required before forecasting
        regression_window: Trailing samples used for the fit (at least min_points)
        smooth_window: Moving-average window applied before fitting
        stall_slope: Slopes at or below this (°/s) count as stalled
        max_eta_hours: Clamp on projected time remaining
        now: Reference time (defaults to current UTC time)
        value: Extracts the fitted value from a sample (defaults to primary probe)

    Returns:
        Prediction (UNKNOWN, ALREADY_DONE, STALLED or ESTIMATED)
    """
    if len(history) < min_points:
        return Prediction.unknown()

    if current_value >= target_value:
        return Prediction.already_done()

    recent = list(history)[-max(min_points, regression_window):]
    smoothed = smooth_samples(recent, smooth_window, value)
    if any(np.isnan(p.value) for p in smoothed):
        # Samples in the window without a reading
        return Prediction.unknown()

    slope = fit_slope(smoothed)
    if slope is None:
        return Prediction.unknown()

    if not np.isfinite(slope) or slope <= stall_slope:
        logger.debug(f"Cook stalled: slope {slope:.6f} °/s <= {stall_slope}")
        return Prediction.stalled(slope)

    with np.errstate(all="ignore"):
        seconds_remaining = float(np.float64(target_value - current_value) / slope)
    if np.isnan(seconds_remaining):
        return Prediction.unknown()
    seconds_remaining = min(seconds_remaining, max_eta_hours * 3600.0)

    reference = now or datetime.now(timezone.utc)
    finish_time = reference + timedelta(seconds=seconds_remaining)
    logger.debug(
        f"Slope {slope:.5f} °/s, {seconds_remaining:.0f}s remaining, ETA {finish_time.isoformat()}"
    )
    return Prediction.estimated_at(finish_time, slope)
