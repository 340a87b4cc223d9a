"""
Sensor Conditioner
Calibration offsets, moving-average smoothing and dead-zone noise gating
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, List, Optional

import numpy as np

from .config import ProcessingConfig
from ..errors import CalibrationError, InsufficientCalibrationSamplesError
from ..models import MotionSample, SensorRole

logger = logging.getLogger(__name__)

AXES = ('ax', 'ay', 'az', 'gx', 'gy', 'gz')


class CalibrationState(str, Enum):
    IDLE = 'idle'
    COLLECTING = 'collecting'
    CALIBRATED = 'calibrated'


@dataclass
class CalibrationProfile:
    """Per-role additive bias, subtracted from every axis once calibrated."""
    hand_offset: np.ndarray = field(default_factory=lambda: np.zeros(6))
    finger_offset: np.ndarray = field(default_factory=lambda: np.zeros(6))
    is_calibrated: bool = False

    def offset_for(self, role: SensorRole) -> np.ndarray:
        return self.hand_offset if role == SensorRole.HAND else self.finger_offset

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            'hand': dict(zip(AXES, (float(v) for v in self.hand_offset))),
            'finger': dict(zip(AXES, (float(v) for v in self.finger_offset))),
        }


class SensorConditioner:
    """
    Signal conditioning for the hand and finger sensors

    Per-sample chain (see condition()):
    - Calibration: subtract the role's resting offset
    - Smoothing: moving average over the last N samples of that role
    - Noise gate: zero axes inside the dead zone (wider for the gyroscope)

    Calibration lifecycle: IDLE -> COLLECTING (start_calibration)
    -> CALIBRATED (finish_calibration). A failed finish keeps collecting and
    leaves the previous profile in force.
    """

    def __init__(self, config: Optional[ProcessingConfig] = None):
        """
        Initialize conditioner

        Args:
            config: Processing configuration
        """
        self.config = config if config else ProcessingConfig.for_realtime()

        self.profile = CalibrationProfile()
        self.calibration_state = CalibrationState.IDLE

        # Smoothing buffers, one per role
        self.buffers: Dict[SensorRole, Deque[MotionSample]] = {
            role: deque(maxlen=self.config.smoothing_window) for role in SensorRole
        }

        # Calibration collection buffers
        self._calibration_samples: Dict[SensorRole, List[MotionSample]] = {
            role: [] for role in SensorRole
        }

        logger.info("Sensor conditioner initialized")
        logger.info(f"  Smoothing window: {self.config.smoothing_window} samples")
        logger.info(f"  Noise gate: accel {self.config.noise_threshold} g, "
                    f"gyro {self.config.gyro_threshold} deg/s")

    # ------------------------------------------------------------------
    # Conditioning steps
    # ------------------------------------------------------------------

    def apply_calibration(self, sample: MotionSample, role: Optional[SensorRole] = None) -> MotionSample:
        """
        Subtract the calibration offset for a sensor role

        Args:
            sample: Raw sample
            role: Sensor role; defaults to the sample's own sensor_id

        Returns:
            Offset-corrected sample, or the input unchanged when calibration
            is disabled or no profile exists yet
        """
        if not self.config.calibration_enabled or not self.profile.is_calibrated:
            return sample

        role = SensorRole(role) if role is not None else sample.sensor_id
        return sample.with_axes(sample.as_array() - self.profile.offset_for(role))

    def apply_smoothing(self, sample: MotionSample, buffer: Deque[MotionSample]) -> MotionSample:
        """
        Moving average over the buffer contents

        Args:
            sample: Incoming sample (appended to buffer)
            buffer: Bounded deque holding recent samples of one role

        Returns:
            Per-axis mean of the buffer, or the sample itself while fewer than
            two samples are buffered
        """
        buffer.append(sample)

        if len(buffer) < 2:
            return sample

        values = np.array([s.as_array() for s in buffer])
        return sample.with_axes(values.mean(axis=0))

    def apply_noise_gate(self, sample: MotionSample, threshold: Optional[float] = None) -> MotionSample:
        """
        Zero axes whose magnitude lies inside the dead zone

        Args:
            sample: Sample to gate
            threshold: Accelerometer dead zone (g); gyroscope uses
                gyro_gate_multiplier times this. Defaults to the configured value.

        Returns:
            Gated sample
        """
        if threshold is None:
            threshold = self.config.noise_threshold
        gyro_threshold = threshold * self.config.gyro_gate_multiplier

        values = sample.as_array()
        limits = np.array([threshold] * 3 + [gyro_threshold] * 3)
        gated = np.where(np.abs(values) < limits, 0.0, values)
        return sample.with_axes(gated)

    def condition(self, sample: MotionSample) -> MotionSample:
        """
        Full conditioning chain: calibration -> smoothing -> noise gate

        Args:
            sample: Raw sample from either sensor

        Returns:
            Conditioned sample
        """
        role = sample.sensor_id
        calibrated = self.apply_calibration(sample, role)
        smoothed = self.apply_smoothing(calibrated, self.buffers[role])
        return self.apply_noise_gate(smoothed)

    def reset_buffers(self):
        """
        Clear smoothing buffers. Calibration is preserved.

        Returns:
            None.
        """
        for buffer in self.buffers.values():
            buffer.clear()

    def resize(self, smoothing_window: int):
        """
        Change the smoothing window, keeping the newest buffered samples

        Args:
            smoothing_window: New window length in samples
        """
        self.buffers = {
            role: deque(buffer, maxlen=smoothing_window)
            for role, buffer in self.buffers.items()
        }
        logger.info(f"Smoothing window resized to {smoothing_window} samples")

    # ------------------------------------------------------------------
    # Calibration lifecycle
    # ------------------------------------------------------------------

    def start_calibration(self):
        """Begin collecting resting samples. The current profile stays in force."""
        self._calibration_samples = {role: [] for role in SensorRole}
        self.calibration_state = CalibrationState.COLLECTING
        logger.info("Calibration started - keep both sensors at rest")

    def add_calibration_sample(
            self,
            hand: Optional[MotionSample] = None,
            finger: Optional[MotionSample] = None
    ):
        """
        Buffer raw samples for offset estimation

        Args:
            hand: Hand sample (optional)
            finger: Finger sample (optional)
        """
        if self.calibration_state != CalibrationState.COLLECTING:
            logger.warning("Calibration sample ignored - calibration not started")
            return

        if hand is not None:
            self._calibration_samples[SensorRole.HAND].append(hand)
        if finger is not None:
            self._calibration_samples[SensorRole.FINGER].append(finger)

    def finish_calibration(self) -> CalibrationProfile:
        """
        Average the collected samples into new offsets

        Returns:
            The new calibration profile

        Raises:
            CalibrationError: If calibration was not started
            InsufficientCalibrationSamplesError: If either role has fewer than
                min_calibration_samples; collection continues and the previous
                profile is kept
        """
        if self.calibration_state != CalibrationState.COLLECTING:
            raise CalibrationError("Call start_calibration() before finish_calibration()")

        hand = self._calibration_samples[SensorRole.HAND]
        finger = self._calibration_samples[SensorRole.FINGER]
        required = self.config.min_calibration_samples

        if len(hand) < required or len(finger) < required:
            raise InsufficientCalibrationSamplesError(len(hand), len(finger), required)

        self.profile = CalibrationProfile(
            hand_offset=np.mean([s.as_array() for s in hand], axis=0),
            finger_offset=np.mean([s.as_array() for s in finger], axis=0),
            is_calibrated=True,
        )
        self._calibration_samples = {role: [] for role in SensorRole}
        self.calibration_state = CalibrationState.CALIBRATED

        logger.info(f"✓ Calibration complete ({len(hand)} hand / {len(finger)} finger samples)")
        logger.debug(f"  Offsets: {self.profile.as_dict()}")
        return self.profile

    def reset_calibration(self):
        """Drop the calibration profile and any samples being collected."""
        self.profile = CalibrationProfile()
        self._calibration_samples = {role: [] for role in SensorRole}
        self.calibration_state = CalibrationState.IDLE
        logger.info("Calibration reset")

    def calibration_sample_counts(self) -> Dict[str, int]:
        return {role.value: len(samples) for role, samples in self._calibration_samples.items()}

    def __repr__(self):
        return f"<SensorConditioner(calibration={self.calibration_state.value})>"
