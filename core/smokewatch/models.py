"""
Smokewatch Data Models

Samples are immutable once recorded. Predictions and statuses are derived
from the history buffer on every new sample and never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Probe:
    """A single temperature probe reading with its own target."""

    id: int
    name: str
    temperature: float
    target: float


@dataclass(frozen=True)
class Sample:
    """One timestamped reading from the controller."""

    timestamp: datetime  # timezone-aware
    pit: float
    probes: tuple[Probe, ...] = field(default_factory=tuple)
    fan_duty: int = 0  # 0-100 %

    @property
    def primary_probe(self) -> Optional[Probe]:
        """First probe (the meat probe), if any."""
        return self.probes[0] if self.probes else None

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "pit": self.pit,
            "fan_duty": self.fan_duty,
            "probes": [
                {"id": p.id, "name": p.name, "temperature": p.temperature, "target": p.target}
                for p in self.probes
            ],
        }


@dataclass(frozen=True)
class SmoothedPoint:
    """Moving-average value at a sample's timestamp."""

    timestamp: datetime
    value: float


class PredictionKind(str, Enum):
    UNKNOWN = "unknown"
    ALREADY_DONE = "already_done"
    STALLED = "stalled"
    ESTIMATED = "estimated"


@dataclass(frozen=True)
class Prediction:
    """Completion forecast for a probe."""

    kind: PredictionKind
    finish_time: Optional[datetime] = None
    time_of_day: Optional[str] = None  # local HH:MM
    slope: Optional[float] = None  # degrees per second

    @classmethod
    def unknown(cls) -> "Prediction":
        return cls(PredictionKind.UNKNOWN)

    @classmethod
    def already_done(cls) -> "Prediction":
        return cls(PredictionKind.ALREADY_DONE)

    @classmethod
    def stalled(cls, slope: Optional[float] = None) -> "Prediction":
        return cls(PredictionKind.STALLED, slope=slope)

    @classmethod
    def estimated_at(cls, finish_time: datetime, slope: float) -> "Prediction":
        """Build an ETA, formatting the finish time as local wall-clock time."""
        return cls(
            PredictionKind.ESTIMATED,
            finish_time=finish_time,
            time_of_day=finish_time.astimezone().strftime("%H:%M"),
            slope=slope,
        )

    @property
    def label(self) -> Optional[str]:
        """Text shown on the dashboard badge (None hides the badge)."""
        if self.kind is PredictionKind.ALREADY_DONE:
            return "Done"
        if self.kind is PredictionKind.STALLED:
            return "Stalled"
        if self.kind is PredictionKind.ESTIMATED:
            return self.time_of_day
        return None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "label": self.label,
            "finish_time": self.finish_time.isoformat() if self.finish_time else None,
            "slope": self.slope,
        }


class LockState(str, Enum):
    LOCKED = "LOCKED"
    ADJUSTING = "ADJUSTING"


class FanState(str, Enum):
    ACTIVE = "ACTIVE"
    IDLE = "IDLE"


class RangeState(str, Enum):
    """Coarser "within range" cue, independent of the lock threshold."""

    HOT = "HOT"
    COLD = "COLD"
    IN_RANGE = "IN_RANGE"


@dataclass(frozen=True)
class Status:
    """Qualitative pit state derived from the latest sample only."""

    lock_state: LockState
    fan_state: FanState
    range_state: RangeState
    pit_delta: float  # pit - target

    def to_dict(self) -> dict:
        return {
            "lock_state": self.lock_state.value,
            "fan_state": self.fan_state.value,
            "range_state": self.range_state.value,
            "pit_delta": self.pit_delta,
        }


@dataclass(frozen=True)
class SessionUpdate:
    """Derived pair emitted after every successful append."""

    sample: Sample
    prediction: Prediction
    status: Status

    def to_dict(self) -> dict:
        return {
            "sample": self.sample.to_dict(),
            "prediction": self.prediction.to_dict(),
            "status": self.status.to_dict(),
        }
