"""
Telemetry History Buffer

Fixed-capacity in-memory store of the session's samples. Oldest samples are
evicted first once capacity is reached.
"""

import threading
from collections import deque
from typing import Optional

from .exceptions import ConfigurationError
from .models import Sample


class HistoryBuffer:
    """Ordered, fixed-capacity sample history."""

    def __init__(self, capacity: int = 100):
        """Initialize history buffer.

        Args:
            capacity: Maximum number of samples to keep

        Raises:
            ConfigurationError: If capacity is less than 1
        """
        if capacity < 1:
            raise ConfigurationError(f"History capacity must be at least 1, got {capacity}")

        self._capacity = capacity
        # deque(maxlen) drops from the head on overflow
        self._samples: deque[Sample] = deque(maxlen=capacity)
        self.lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, sample: Sample) -> None:
        """Append a sample, evicting the oldest ones beyond capacity.

        Out-of-order timestamps are accepted as given.
        """
        with self.lock:
            self._samples.append(sample)

    def snapshot(self) -> list[Sample]:
        """Current samples, oldest first.

        The returned list is a copy; it does not reflect later appends.
        """
        with self.lock:
            return list(self._samples)

    def latest(self) -> Optional[Sample]:
        with self.lock:
            return self._samples[-1] if self._samples else None

    def clear(self) -> None:
        with self.lock:
            self._samples.clear()

    def __len__(self) -> int:
        with self.lock:
            return len(self._samples)
