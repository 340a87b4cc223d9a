"""
Orientation Filter Configuration
Gradient-descent gain and integration-step bounds
"""

from dataclasses import dataclass


@dataclass
class OrientationConfig:
    """Orientation filter configuration parameters"""

    # Gradient-descent correction gain
    beta: float = 0.1

    # Integration step bounds (seconds)
    min_dt: float = 0.001  # 1 ms - rejects bursty duplicates
    max_dt: float = 0.1    # 100 ms - rejects stalled streams
    default_dt: float = 0.01  # first update, no previous timestamp (100 Hz)

    def __post_init__(self):
        if self.beta < 0:
            raise ValueError(f"beta must be non-negative, got {self.beta}")
        if not 0 < self.min_dt <= self.max_dt:
            raise ValueError(
                f"Invalid dt bounds: min_dt={self.min_dt}, max_dt={self.max_dt}"
            )

    def clamp_dt(self, dt: float) -> float:
        """
        Bound an integration step to [min_dt, max_dt].

        Args:
            dt: Raw elapsed time in seconds

        Returns:
            Clamped step in seconds
        """
        return max(self.min_dt, min(self.max_dt, dt))
