"""
Pit status classification.

Two independent thresholds drive two different indicators:
- lock_threshold (5°) -> LOCKED / ADJUSTING label on the pit gauge
- range_threshold (10°) -> hot / cold / in-range colour cue
"""

from .models import FanState, LockState, RangeState, Status

DEFAULT_LOCK_THRESHOLD = 5.0
DEFAULT_RANGE_THRESHOLD = 10.0


def classify_status(
    pit: float,
    pit_target: float,
    fan_duty: float,
    *,
    lock_threshold: float = DEFAULT_LOCK_THRESHOLD,
    range_threshold: float = DEFAULT_RANGE_THRESHOLD,
) -> Status:
    """Classify the latest reading against the pit set-point.

    Args:
        pit: Current pit temperature
        pit_target: Pit set-point
        fan_duty: Fan output (0-100 %)
        lock_threshold: Exclusive bound on |pit - target| for LOCKED
        range_threshold: Distance beyond which the pit is HOT or COLD

    Returns:
        Status
    """
    delta = pit - pit_target

    lock_state = LockState.LOCKED if abs(delta) < lock_threshold else LockState.ADJUSTING
    fan_state = FanState.ACTIVE if fan_duty > 0 else FanState.IDLE

    if pit > pit_target + range_threshold:
        range_state = RangeState.HOT
    elif pit < pit_target - range_threshold:
        range_state = RangeState.COLD
    else:
        range_state = RangeState.IN_RANGE

    return Status(
        lock_state=lock_state,
        fan_state=fan_state,
        range_state=range_state,
        pit_delta=delta,
    )
