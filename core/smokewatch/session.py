"""
Monitoring session.

Owns the history buffer and settings for one cook. Every successful
record() appends the sample and synchronously derives a new prediction and
status pair, which is published to subscribers.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .export import export_csv
from .history import HistoryBuffer
from .models import Prediction, Sample, SessionUpdate, Status
from .predictor import predict_completion
from .settings import MonitorSettings
from .status import classify_status

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[SessionUpdate], None]


class MonitorSession:
    """State of a single monitoring session."""

    def __init__(self, settings: Optional[MonitorSettings] = None):
        self.settings = settings or MonitorSettings()
        self.history = HistoryBuffer(self.settings.history_capacity)

        self.connected = False
        self.last_error: Optional[str] = None
        self.last_update: Optional[SessionUpdate] = None
        self.last_update_time: Optional[datetime] = None

        self._subscribers: list[UpdateCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: UpdateCallback) -> Callable[[], None]:
        """Register a callback for every SessionUpdate.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def predict(self, history: list[Sample], sample: Sample) -> Prediction:
        """Forecast completion of the sample's primary probe."""
        probe = sample.primary_probe
        if probe is None:
            return Prediction.unknown()

        s = self.settings
        return predict_completion(
            history,
            probe.temperature,
            probe.target,
            min_points=s.min_points,
            regression_window=s.regression_window,
            smooth_window=s.smooth_window,
            stall_slope=s.stall_slope,
            max_eta_hours=s.max_eta_hours,
        )

    def classify(self, sample: Sample) -> Status:
        return classify_status(
            sample.pit,
            self.settings.pit_target,
            sample.fan_duty,
            lock_threshold=self.settings.lock_threshold,
            range_threshold=self.settings.range_threshold,
        )

    def record(self, sample: Sample) -> SessionUpdate:
        """Append a sample and derive the new prediction and status.

        Append and derive run under one lock so readers never see a
        prediction computed from a buffer mid-update.
        """
        with self._lock:
            self.history.append(sample)
            update = SessionUpdate(
                sample=sample,
                prediction=self.predict(self.history.snapshot(), sample),
                status=self.classify(sample),
            )
            self.last_update = update
            self.last_update_time = datetime.now(timezone.utc)
            self.connected = True
            self.last_error = None

        for callback in list(self._subscribers):
            try:
                callback(update)
            except Exception as e:
                logger.error(f"Session subscriber failed: {e}", exc_info=True)

        return update

    def mark_unreachable(self, error: Exception | str) -> None:
        """Record a source failure; the last known state is kept."""
        with self._lock:
            self.connected = False
            self.last_error = str(error)
        logger.warning(f"Sample source unavailable: {error}")

    def set_pit_target(self, pit_target: float) -> None:
        """Change the pit set-point used for status classification."""
        with self._lock:
            self.settings.pit_target = pit_target
        logger.info(f"Pit target set to {pit_target}°")

    def reset(self) -> None:
        """Start a new cook: drop the history and last derived state."""
        with self._lock:
            self.history.clear()
            self.last_update = None
            self.last_update_time = None
        logger.info("Session history cleared")

    def export_csv(self, per_sample_fan: bool = False) -> str:
        """Cook log for the buffered samples.

        Args:
            per_sample_fan: Write each sample's fan duty instead of the
                current fan duty on every row
        """
        with self._lock:
            history = self.history.snapshot()
            latest = self.last_update.sample if self.last_update else None

        current_fan = None if per_sample_fan else (latest.fan_duty if latest else 0)
        return export_csv(history, current_fan)

    def state(self) -> dict:
        """JSON-ready view of the session for the dashboard."""
        with self._lock:
            update = self.last_update
            return {
                "connected": self.connected,
                "last_error": self.last_error,
                "last_update": self.last_update_time.isoformat() if self.last_update_time else None,
                "mode": self.settings.mode,
                "pit_target": self.settings.pit_target,
                "history_length": len(self.history),
                "history_capacity": self.history.capacity,
                "sample": update.sample.to_dict() if update else None,
                "prediction": update.prediction.to_dict() if update else Prediction.unknown().to_dict(),
                "status": update.status.to_dict() if update else None,
            }
