"""
Signal Conditioning Configuration
Calibration, smoothing, noise gating and compensation parameters
"""

from dataclasses import dataclass, fields, replace


@dataclass
class ProcessingConfig:
    """Per-sensor conditioning and hand-compensation parameters"""

    # Hand compensation strength (scaled adaptively to [0.5, 1.0])
    compensation_factor: float = 1.0

    # Moving-average window (samples)
    smoothing_window: int = 5

    # Dead zone: accel axes below this are zeroed (g),
    # gyro axes below gyro_gate_multiplier x this (deg/s)
    noise_threshold: float = 0.05
    gyro_gate_multiplier: float = 10.0

    # Calibration
    calibration_enabled: bool = True
    min_calibration_samples: int = 10

    def __post_init__(self):
        if self.smoothing_window < 1:
            raise ValueError(f"smoothing_window must be >= 1, got {self.smoothing_window}")
        if self.noise_threshold < 0:
            raise ValueError(f"noise_threshold must be >= 0, got {self.noise_threshold}")
        if self.compensation_factor < 0:
            raise ValueError(f"compensation_factor must be >= 0, got {self.compensation_factor}")
        if self.min_calibration_samples < 1:
            raise ValueError(
                f"min_calibration_samples must be >= 1, got {self.min_calibration_samples}"
            )

    @property
    def gyro_threshold(self) -> float:
        """Dead-zone width for gyroscope axes (deg/s)."""
        return self.noise_threshold * self.gyro_gate_multiplier

    def updated(self, **changes) -> 'ProcessingConfig':
        """
        Copy of this configuration with some fields replaced.

        Raises:
            ValueError: On unknown field names or invalid values
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown processing config fields: {sorted(unknown)}")
        return replace(self, **changes)

    @classmethod
    def for_realtime(cls) -> 'ProcessingConfig':
        """
        Default configuration for live dual-sensor processing.

        Returns:
            ProcessingConfig with calibration offsets applied.
        """
        return cls(calibration_enabled=True)

    @classmethod
    def for_raw(cls) -> 'ProcessingConfig':
        """
        Pass-through configuration: no smoothing, no dead zone, no offsets.

        Returns:
            ProcessingConfig that leaves samples unchanged before compensation.
        """
        return cls(
            smoothing_window=1,
            noise_threshold=0.0,
            calibration_enabled=False,
        )
