"""
Sample sources.

A source produces one Sample per call to read(). Sources may block (network
polling); the sampling service runs them off the event loop.
"""

import logging
import math
import random
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .device_client import DeviceClient
from .exceptions import SensorError
from .models import Probe, Sample

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clamp_duty(value: float) -> int:
    return int(max(0, min(100, round(value))))


class SampleSource:
    """Base class for anything that yields telemetry samples."""

    name = "source"

    def read(self) -> Sample:
        """Produce the next sample.

        Raises:
            SmokewatchError: If no sample can be produced this tick
        """
        raise NotImplementedError


class DemoSampleSource(SampleSource):
    """Synthetic cook used when no controller is configured.

    The pit drifts toward its set-point with noise, the meat probe rises
    slowly, and the fan ramps up while the pit is below target. Pass
    target_provider to follow a set-point that changes during the cook.
    """

    name = "demo"

    def __init__(
        self,
        pit_target: float = 225.0,
        meat_target: float = 195.0,
        start_pit: float = 215.0,
        start_meat: float = 150.0,
        start_fan: float = 20.0,
        drift: float = 0.1,
        noise: float = 1.5,
        meat_rise: float = 0.05,
        meat_jitter: float = 0.05,
        fan_step: float = 2.0,
        seed: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
        target_provider: Optional[Callable[[], float]] = None,
    ):
        self._pit_target = pit_target
        self.target_provider = target_provider
        self.meat_target = meat_target
        self.pit = start_pit
        self.meat = start_meat
        self.fan = start_fan
        self.drift = drift
        self.noise = noise
        self.meat_rise = meat_rise
        self.meat_jitter = meat_jitter
        self.fan_step = fan_step
        self.clock = clock
        self._rng = random.Random(seed)

    @property
    def pit_target(self) -> float:
        if self.target_provider is not None:
            return self.target_provider()
        return self._pit_target

    def read(self) -> Sample:
        pit_target = self.pit_target
        self.pit += (pit_target - self.pit) * self.drift + (self._rng.random() - 0.5) * self.noise
        self.meat += self.meat_rise + self._rng.random() * self.meat_jitter

        if self.pit < pit_target:
            self.fan = min(100.0, self.fan + self.fan_step)
        else:
            self.fan = max(0.0, self.fan - self.fan_step)

        return Sample(
            timestamp=self.clock(),
            pit=self.pit,
            probes=(
                Probe(id=1, name="Pork Shoulder", temperature=self.meat, target=self.meat_target),
                Probe(id=2, name="Ambient", temperature=self.pit - 15, target=0.0),
            ),
            fan_duty=_clamp_duty(self.fan),
        )


def _number(payload: dict[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if payload.get(key) is not None:
            try:
                value = float(payload[key])
            except (TypeError, ValueError) as e:
                raise SensorError(f"Non-numeric value for '{key}': {payload[key]!r}") from e
            if not math.isfinite(value):
                raise SensorError(f"Non-finite value for '{key}': {payload[key]!r}")
            return value
    return None


def sample_from_payload(payload: dict[str, Any], timestamp: Optional[datetime] = None) -> Sample:
    """Map a controller JSON status into a Sample.

    Accepts the dashboard status shape:
        {"pitTemp": 224.5, "fanSpeed": 40,
         "probes": [{"id": 1, "name": "Brisket", "temp": 160.2, "target": 203}]}
    with "pit" / "fan" / "temperature" accepted as alternatives.

    Raises:
        SensorError: If the pit temperature is missing or a value is not a
            finite number
    """
    if not isinstance(payload, dict):
        raise SensorError(f"Unexpected device payload type: {type(payload).__name__}")

    pit = _number(payload, "pitTemp", "pit")
    if pit is None:
        raise SensorError("Device payload has no pit temperature")

    fan = _number(payload, "fanSpeed", "fan") or 0.0

    probes = []
    for i, raw in enumerate(payload.get("probes") or [], start=1):
        if not isinstance(raw, dict):
            raise SensorError(f"Unexpected probe entry: {raw!r}")
        temperature = _number(raw, "temp", "temperature")
        if temperature is None:
            logger.debug(f"Skipping probe {raw.get('id', i)} without a reading")
            continue
        try:
            probe_id = int(raw.get("id", i))
        except (TypeError, ValueError, OverflowError):
            probe_id = i
        probes.append(Probe(
            id=probe_id,
            name=str(raw.get("name", f"Probe {i}")),
            temperature=temperature,
            target=_number(raw, "target") or 0.0,
        ))

    return Sample(
        timestamp=timestamp or _utcnow(),
        pit=pit,
        probes=tuple(probes),
        fan_duty=_clamp_duty(fan),
    )


class DeviceSampleSource(SampleSource):
    """Polls a live controller for each sample."""

    name = "live"

    def __init__(self, client: DeviceClient, ip: str):
        self.client = client
        self.ip = ip

    def read(self) -> Sample:
        payload = self.client.get_status(self.ip)
        return sample_from_payload(payload)
