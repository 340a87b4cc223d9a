"""Thread-safe bounded FIFO of recent samples for one stream."""
import threading
from collections import deque
from typing import Deque, Generic, List, Optional, TypeVar

T = TypeVar('T')


class MotionWindow(Generic[T]):
    """Rolling window of the last N samples; the oldest is evicted when full."""

    def __init__(self, capacity: int = 100):
        """
        Initialize window.

        Args:
            capacity: Maximum number of samples retained
        """
        if capacity < 1:
            raise ValueError(f"Window capacity must be positive, got {capacity}")
        self.lock = threading.Lock()
        self.ring: Deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self.ring.maxlen

    def push(self, sample: T) -> None:
        """Append a sample, evicting the oldest one if full."""
        with self.lock:
            self.ring.append(sample)

    def snapshot(self) -> List[T]:
        """Read-only copy of the current contents, oldest first."""
        with self.lock:
            return list(self.ring)

    def latest(self) -> Optional[T]:
        with self.lock:
            return self.ring[-1] if self.ring else None

    def clear(self) -> None:
        with self.lock:
            self.ring.clear()

    def __len__(self) -> int:
        with self.lock:
            return len(self.ring)

    def __repr__(self):
        return f"<MotionWindow(size={len(self)}/{self.capacity})>"
