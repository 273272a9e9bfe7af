"""
Sampling Service

Background task that pulls one sample per tick from the configured source
and records it into the monitoring session. It is the session's only
writer; stopping it halts all further mutation.
"""

import asyncio
import logging
from typing import Optional

import requests

from .device_client import DeviceClient
from .exceptions import ConfigurationError, SmokewatchError
from .session import MonitorSession
from .settings import MonitorSettings
from .sources import DemoSampleSource, DeviceSampleSource, SampleSource

logger = logging.getLogger(__name__)


def build_source(settings: MonitorSettings, client: Optional[DeviceClient] = None) -> SampleSource:
    """Create the sample source for the configured mode.

    Raises:
        ConfigurationError: If live mode has no device address
    """
    if settings.mode == "live":
        if not settings.device_ip:
            raise ConfigurationError("Live mode requires a device address")
        return DeviceSampleSource(client or DeviceClient(settings.device_timeout), settings.device_ip)

    # Follow the session's set-point so target changes take effect mid-cook
    return DemoSampleSource(
        drift=settings.demo_drift,
        noise=settings.demo_noise,
        target_provider=lambda: settings.pit_target,
    )


class SamplingService:
    """Cancellable periodic sampler feeding a MonitorSession."""

    def __init__(
        self,
        session: MonitorSession,
        source: SampleSource,
        interval_seconds: float = 3.0
    ):
        self.session = session
        self.source = source
        self.interval_seconds = interval_seconds

        self._task: asyncio.Task | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the sampling loop."""
        if self._running:
            logger.warning("Sampling service already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Sampling service started ({self.source.name} source, every {self.interval_seconds}s)")

    async def stop(self):
        """Stop the sampling loop and wait for it to exit."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Sampling service stopped")

    async def poll_once(self) -> bool:
        """Read one sample and record it.

        Returns:
            True if a sample was recorded, False if the source failed
        """
        try:
            sample = await asyncio.to_thread(self.source.read)
        except (SmokewatchError, requests.exceptions.RequestException) as e:
            self.session.mark_unreachable(e)
            return False

        update = self.session.record(sample)
        logger.debug(
            f"Recorded sample pit={sample.pit:.1f} fan={sample.fan_duty}% "
            f"status={update.status.lock_state.value} eta={update.prediction.label}"
        )
        return True

    async def _run_loop(self):
        """Main loop - one sample per interval."""
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Error in sampling loop: {e}", exc_info=True)

            # Sleep until next interval
            await asyncio.sleep(self.interval_seconds)
