"""
Smokewatch Custom Exceptions

Simple exception hierarchy for error handling.
"""


class SmokewatchError(Exception):
    """Base exception for Smokewatch."""

    pass


class ConfigurationError(SmokewatchError):
    """Configuration is invalid (e.g. live mode without a device address)."""

    pass


class DeviceUnreachableError(SmokewatchError):
    """Cannot reach the temperature controller."""

    pass


class SensorError(SmokewatchError):
    """Device payload is missing readings or cannot be mapped to a sample."""

    pass
