"""
Simple HTTP client for the temperature controller.

The controller exposes its current state as JSON at http://<ip>/json.
"""

import logging
from typing import Any

import requests

from .exceptions import ConfigurationError, DeviceUnreachableError

logger = logging.getLogger(__name__)


class DeviceClient:
    """Read-only controller API client."""

    def __init__(self, timeout: float = 4.0):
        """Initialize device client.

        Args:
            timeout: Request timeout in seconds
        """
        # Create a session for connection pooling
        self.session = requests.Session()
        self.timeout = timeout

    def get_status(self, ip: str) -> dict[str, Any]:
        """Fetch the controller's JSON status.

        Args:
            ip: Device address (host or host:port)

        Returns:
            Parsed JSON body, unvalidated

        Raises:
            ConfigurationError: If no address is given
            DeviceUnreachableError: If the request fails or the body is not JSON
        """
        if not ip:
            raise ConfigurationError("Missing device address")

        url = f"http://{ip}/json"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise DeviceUnreachableError(f"Device request to {url} failed: {e}") from e
        except ValueError as e:
            raise DeviceUnreachableError(f"Device at {url} returned invalid JSON: {e}") from e

    def close(self) -> None:
        self.session.close()
