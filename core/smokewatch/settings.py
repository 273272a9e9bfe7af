"""
Smokewatch Configuration Settings

User-facing settings are loaded from options.json (add-on deployment),
config.yaml (development) and environment overrides, in that order.
"""

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, fields
from typing import Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

OPTIONS_PATH = "/data/options.json"
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "..", "config.yaml")

MODES = ("demo", "live")


def _camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


@dataclass
class MonitorSettings:
    """Configuration for a monitoring session."""

    mode: str = "demo"  # "demo" or "live"
    device_ip: str = ""
    refresh_seconds: float = 3.0  # Sampling cadence
    history_capacity: int = 100  # Samples kept in memory
    pit_target: float = 225.0  # Pit set-point (°F)
    lock_threshold: float = 5.0  # |pit - target| below this is LOCKED
    range_threshold: float = 10.0  # Separate hot/cold visual cue
    min_points: int = 8  # Samples needed before forecasting
    regression_window: int = 12  # Trailing samples used for the trend fit
    smooth_window: int = 3  # Moving-average window
    stall_slope: float = 0.0005  # °/s at or below which a cook counts as stalled
    max_eta_hours: float = 48.0  # Upper bound on projected time remaining
    device_timeout: float = 4.0  # Seconds
    demo_drift: float = 0.1  # Fraction of the pit gap closed per demo tick
    demo_noise: float = 1.5  # Peak-to-peak demo pit noise (°)
    static_dir: str = "client/dist"

    @classmethod
    def from_dict(cls, data: dict) -> "MonitorSettings":
        """Create from dictionary (camelCase or snake_case keys)."""
        known = {f.name for f in fields(cls)}
        converted = {_camel_to_snake(k): v for k, v in data.items()}

        # Dashboard config used ipAddress / refreshRate (ms)
        if "ip_address" in converted:
            converted.setdefault("device_ip", converted.pop("ip_address"))
        if "refresh_rate" in converted:
            converted.setdefault("refresh_seconds", float(converted.pop("refresh_rate")) / 1000.0)

        unknown = set(converted) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {sorted(unknown)}")

        return cls(**{k: v for k, v in converted.items() if k in known})

    def validate(self) -> "MonitorSettings":
        """Check settings and return self.

        Raises:
            ConfigurationError: If any value is out of range
        """
        if self.mode not in MODES:
            raise ConfigurationError(f"Unknown mode '{self.mode}', expected one of {MODES}")
        if self.mode == "live" and not self.device_ip:
            raise ConfigurationError("Live mode requires a device address")
        if self.history_capacity < 1:
            raise ConfigurationError("history_capacity must be at least 1")
        if self.refresh_seconds <= 0:
            raise ConfigurationError("refresh_seconds must be positive")
        if self.min_points < 2 or self.regression_window < 2:
            raise ConfigurationError("min_points and regression_window must be at least 2")
        if self.smooth_window < 1:
            raise ConfigurationError("smooth_window must be at least 1")
        if self.max_eta_hours <= 0:
            raise ConfigurationError("max_eta_hours must be positive")
        if not 0 < self.demo_drift <= 1:
            raise ConfigurationError("demo_drift must be in (0, 1]")
        if self.demo_noise < 0:
            raise ConfigurationError("demo_noise must not be negative")
        return self

    def to_dict(self) -> dict:
        return asdict(self)


def _read_options(config_path: Optional[str]) -> dict:
    """Read the options section from options.json or config.yaml."""
    if os.path.exists(OPTIONS_PATH):
        with open(OPTIONS_PATH) as f:
            options = json.load(f)
        logger.info(f"Loaded settings from {OPTIONS_PATH}")
        return options.get("options", options)

    path = config_path or DEFAULT_CONFIG_PATH
    if os.path.exists(path):
        with open(path) as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded settings from {path}")
        return config.get("options", {})

    logger.warning("No configuration file found, using defaults")
    return {}


def load_settings(config_path: Optional[str] = None) -> MonitorSettings:
    """Load and validate monitor settings.

    Args:
        config_path: Optional path to a config.yaml (defaults to repo root)

    Returns:
        Validated MonitorSettings

    Raises:
        ConfigurationError: If the resulting settings are invalid
    """
    options = _read_options(config_path)

    load_dotenv()
    if os.getenv("SMOKEWATCH_MODE"):
        options["mode"] = os.environ["SMOKEWATCH_MODE"]
    if os.getenv("SMOKEWATCH_DEVICE_IP"):
        options["device_ip"] = os.environ["SMOKEWATCH_DEVICE_IP"]
    if os.getenv("SMOKEWATCH_REFRESH_SECONDS"):
        try:
            options["refresh_seconds"] = float(os.environ["SMOKEWATCH_REFRESH_SECONDS"])
        except ValueError as e:
            raise ConfigurationError(f"Invalid SMOKEWATCH_REFRESH_SECONDS: {e}") from e

    return MonitorSettings.from_dict(options).validate()
