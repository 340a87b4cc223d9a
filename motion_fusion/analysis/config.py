"""
Motion Analysis Configuration
Window sizes, activity thresholds and classifier parameters
"""

import math
from dataclasses import dataclass


@dataclass
class AnalysisConfig:
    """Window analysis and pattern classification parameters"""

    # Rolling windows
    window_size: int = 100          # ~2 s at 50 Hz
    min_samples: int = 10           # below this, analysis returns neutral values
    combined_min_samples: int = 16  # per-stream minimum for energy analysis

    # Numerical guard for ratios
    epsilon: float = 0.001

    # Direction change detection (radians between consecutive XY headings)
    direction_change_angle: float = math.pi / 4

    # Autocorrelation periodicity proxy
    max_period: int = 20

    # Threshold (dominant actor) classifier
    activity_threshold: float = 2.0     # g
    activity_confidence_scale: float = 5.0
    threshold_lookback: int = 10        # samples averaged per stream

    # Gesture templates
    gesture_confidence_threshold: float = 0.7

    # Combined (energy) classifier
    hand_weight: float = 0.6
    finger_weight: float = 0.4
    min_combined_confidence: float = 0.1
    max_combined_confidence: float = 0.99

    # Pattern history
    history_size: int = 50
    history_confidence_threshold: float = 0.75

    def __post_init__(self):
        if self.min_samples < 2:
            raise ValueError(f"min_samples must be >= 2, got {self.min_samples}")
        if self.window_size < self.min_samples:
            raise ValueError(
                f"window_size ({self.window_size}) must hold at least "
                f"min_samples ({self.min_samples})"
            )
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")

    @classmethod
    def for_realtime(cls) -> 'AnalysisConfig':
        """
        Configuration for live classification at ~50 Hz.

        Returns:
            AnalysisConfig with a 100-sample window.
        """
        return cls(window_size=100)

    @classmethod
    def for_short_window(cls) -> 'AnalysisConfig':
        """
        Configuration with a 64-sample window and a 20-entry history.

        Returns:
            AnalysisConfig tuned for quicker turnover of patterns.
        """
        return cls(window_size=64, history_size=20)
