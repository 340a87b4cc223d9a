"""
Orientation Filter
Gradient-descent quaternion estimator (Madgwick IMU variant)
"""

import math
import logging
from typing import Optional, Union

import numpy as np

from .config import OrientationConfig
from ..coordinator.clock import MonotonicClock
from ..models import CompensatedSample, MotionSample, Quaternion

logger = logging.getLogger(__name__)


class OrientationFilter:
    """
    Per-stream orientation estimator

    Fuses gyroscope rates with the gravity direction measured by the
    accelerometer:
    - Gyroscope integration via quaternion kinematics
    - Gradient-descent correction towards the measured gravity vector
    - Integration step derived from update timestamps, clamped to the
      configured bounds

    Degenerate input (zero accelerometer vector, zero gradient) is absorbed
    without raising; the last valid orientation is kept.
    """

    def __init__(
            self,
            config: Optional[OrientationConfig] = None,
            clock: Optional[MonotonicClock] = None,
            name: str = 'stream'
    ):
        """
        Initialize orientation filter

        Args:
            config: Orientation configuration
            clock: Time base used when update() gets no timestamp
            name: Stream label used in log messages
        """
        self.config = config if config else OrientationConfig()
        self.clock = clock if clock else MonotonicClock()
        self.name = name

        self._q = np.array([1.0, 0.0, 0.0, 0.0])
        self._last_update: Optional[float] = None
        self.update_count = 0

        logger.debug(f"Orientation filter '{name}' initialized (beta={self.config.beta})")

    @property
    def beta(self) -> float:
        return self.config.beta

    def update(
            self,
            gx: float, gy: float, gz: float,
            ax: float, ay: float, az: float,
            timestamp: Optional[float] = None
    ):
        """
        Advance the orientation estimate by one sample

        Args:
            gx, gy, gz: Angular rate (rad/s)
            ax, ay, az: Acceleration (any consistent unit, only direction is used)
            timestamp: Sample time in seconds; read from the clock when omitted
        """
        # 1. Integration step
        now = timestamp if timestamp is not None else self.clock.now()
        if self._last_update is None:
            dt = self.config.default_dt
        else:
            dt = self.config.clamp_dt(now - self._last_update)
        self._last_update = now

        # 2. Normalise accelerometer (no gravity reference -> no update)
        norm = math.sqrt(ax * ax + ay * ay + az * az)
        if norm == 0:
            return
        ax, ay, az = ax / norm, ay / norm, az / norm

        q0, q1, q2, q3 = self._q

        # 3. Objective function: predicted minus measured gravity direction
        f = np.array([
            2.0 * (q1 * q3 - q0 * q2) - ax,
            2.0 * (q0 * q1 + q2 * q3) - ay,
            2.0 * (0.5 - q1 * q1 - q2 * q2) - az,
        ])

        # 4. Jacobian of f with respect to (q0, q1, q2, q3)
        jacobian = np.array([
            [-2.0 * q2, 2.0 * q3, -2.0 * q0, 2.0 * q1],
            [2.0 * q1, 2.0 * q0, 2.0 * q3, 2.0 * q2],
            [0.0, -4.0 * q1, -4.0 * q2, 0.0],
        ])

        # 5. Gradient, normalised unless zero
        step = jacobian.T @ f
        step_norm = np.linalg.norm(step)
        if step_norm != 0:
            step = step / step_norm

        # 6. Rate of change of quaternion from gyroscope
        q_dot = 0.5 * np.array([
            -q1 * gx - q2 * gy - q3 * gz,
            q0 * gx + q2 * gz - q3 * gy,
            q0 * gy - q1 * gz + q3 * gx,
            q0 * gz + q1 * gy - q2 * gx,
        ])

        # 7. Feedback correction
        q_dot = q_dot - self.config.beta * step

        # 8. Integrate
        q = self._q + q_dot * dt

        # 9. Normalise
        q_norm = np.linalg.norm(q)
        if q_norm == 0 or not np.isfinite(q_norm):
            logger.debug(f"Degenerate quaternion on '{self.name}', keeping previous orientation")
            return
        self._q = q / q_norm
        self.update_count += 1

    def update_from_sample(
            self,
            sample: Union[MotionSample, CompensatedSample],
            timestamp: Optional[float] = None
    ):
        """
        Update from a sample record, converting deg/s to rad/s

        Args:
            sample: Raw, conditioned or compensated sample
            timestamp: Override in seconds; defaults to the sample timestamp
        """
        gyro = np.radians(sample.gyro)
        accel = sample.accel
        if timestamp is None:
            timestamp = sample.timestamp / 1000.0
        self.update(
            float(gyro[0]), float(gyro[1]), float(gyro[2]),
            float(accel[0]), float(accel[1]), float(accel[2]),
            timestamp=timestamp,
        )

    def get_quaternion(self) -> Quaternion:
        """Current orientation as a unit quaternion."""
        w, x, y, z = self._q
        return Quaternion(float(w), float(x), float(y), float(z))

    def reset(self):
        """Restore identity orientation and clear timing state."""
        self._q = np.array([1.0, 0.0, 0.0, 0.0])
        self._last_update = None
        self.update_count = 0
        logger.debug(f"Orientation filter '{self.name}' reset")

    def __repr__(self):
        w, x, y, z = self._q
        return f"<OrientationFilter({self.name}, q=({w:.3f}, {x:.3f}, {y:.3f}, {z:.3f}))>"
