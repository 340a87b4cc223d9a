"""
Monotonic Clock
Time base for orientation filters fed without sample timestamps
"""

import threading
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class MonotonicClock:
    """
    Thread-safe monotonic clock in seconds

    Guarantees:
    - Thread-safe access (several filters can call simultaneously)
    - Strictly increasing readings (no two calls return the same value)
    - Immune to wall-clock adjustments (backed by time.monotonic)
    """

    # Smallest step used when the underlying clock has not advanced
    _MIN_STEP = 1e-6

    def __init__(self):
        """Initialize monotonic clock"""
        self._lock = threading.Lock()
        self._last_reading: Optional[float] = None
        self._call_count = 0

    def now(self) -> float:
        """
        Get the current reading

        Returns:
            float: Seconds on the monotonic time base
        """
        with self._lock:
            current = time.monotonic()

            if self._last_reading is not None and current <= self._last_reading:
                current = self._last_reading + self._MIN_STEP
                logger.debug("Adjusted clock reading to maintain monotonic sequence")

            self._last_reading = current
            self._call_count += 1

            return current

    def reset(self):
        """Reset clock state (useful for testing)"""
        with self._lock:
            self._last_reading = None
            self._call_count = 0

    def get_stats(self) -> dict:
        """
        Get clock statistics

        Returns:
            dict: Clock usage statistics
        """
        with self._lock:
            return {
                'total_calls': self._call_count,
                'last_reading': self._last_reading,
            }

    def __repr__(self):
        return f"<MonotonicClock(calls={self._call_count})>"
