"""
Dual-Sensor Simulator
Synthetic hand/finger sample streams for demos and pipeline tests
"""

import logging
from typing import Iterator, Optional, Tuple

import numpy as np

from .models import MotionSample, SensorRole

logger = logging.getLogger(__name__)

SCENARIOS = ('rest', 'hand', 'tap', 'swipe', 'rotation', 'random')

SamplePair = Tuple[MotionSample, MotionSample]


class DualSensorSimulator:
    """
    Generates paired hand/finger samples for named motion scenarios

    Scenarios:
    - rest     : both sensors still
    - hand     : sustained ~8 g hand acceleration, finger still
    - tap      : a single 200 ms, 5 g finger spike in the middle of the run
    - swipe    : finger acceleration ramping steadily along x
    - rotation : hand spinning about z at 200 deg/s
    - random   : uncorrelated moderate motion on both sensors
    """

    def __init__(
            self,
            rate_hz: float = 50.0,
            seed: Optional[int] = None,
            accel_noise: float = 0.01,
            gyro_noise: float = 0.2,
            gravity: float = 0.0
    ):
        """
        Initialize simulator

        Args:
            rate_hz: Samples per second per sensor
            seed: RNG seed for reproducible noise
            accel_noise: Gaussian accel noise standard deviation (g)
            gyro_noise: Gaussian gyro noise standard deviation (deg/s)
            gravity: Constant z acceleration added to both sensors (g);
                1.0 mimics an uncalibrated sensor lying flat
        """
        if rate_hz <= 0:
            raise ValueError(f"rate_hz must be positive, got {rate_hz}")
        self.rate_hz = rate_hz
        self.rng = np.random.default_rng(seed)
        self.accel_noise = accel_noise
        self.gyro_noise = gyro_noise
        self.gravity = gravity

    @property
    def period_ms(self) -> float:
        return 1000.0 / self.rate_hz

    def generate(self, scenario: str, duration_s: float, start_ms: float = 0.0) -> Iterator[SamplePair]:
        """
        Yield (hand, finger) pairs for a scenario

        Args:
            scenario: One of SCENARIOS
            duration_s: Length of the run in seconds
            start_ms: Timestamp of the first pair

        Yields:
            (hand, finger) sample pairs in timestamp order
        """
        if scenario not in SCENARIOS:
            raise ValueError(f"Unknown scenario '{scenario}', expected one of {SCENARIOS}")

        count = int(round(duration_s * self.rate_hz))
        logger.info(f"Simulating '{scenario}' for {duration_s}s ({count} pairs @ {self.rate_hz} Hz)")

        for i in range(count):
            t_ms = start_ms + i * self.period_ms
            elapsed_ms = i * self.period_ms
            hand_axes, finger_axes = self._scenario_axes(scenario, elapsed_ms, duration_s * 1000.0)
            yield (
                self._sample(hand_axes, t_ms, SensorRole.HAND),
                self._sample(finger_axes, t_ms, SensorRole.FINGER),
            )

    def _scenario_axes(self, scenario: str, elapsed_ms: float, total_ms: float) -> Tuple[np.ndarray, np.ndarray]:
        hand = np.zeros(6)
        finger = np.zeros(6)

        if scenario == 'hand':
            hand[0] = 8.0
        elif scenario == 'tap':
            spike_start = total_ms / 2
            if spike_start <= elapsed_ms < spike_start + 200:
                finger[0] = 5.0
        elif scenario == 'swipe':
            finger[0] = elapsed_ms / 1000.0 * 40.0
        elif scenario == 'rotation':
            hand[5] = 200.0
        elif scenario == 'random':
            hand[:3] = self.rng.normal(0, 1.5, 3)
            hand[3:] = self.rng.normal(0, 40, 3)
            finger[:3] = self.rng.normal(0, 2.0, 3)
            finger[3:] = self.rng.normal(0, 60, 3)

        return hand, finger

    def _sample(self, axes: np.ndarray, t_ms: float, role: SensorRole) -> MotionSample:
        noise = np.concatenate([
            self.rng.normal(0, self.accel_noise, 3),
            self.rng.normal(0, self.gyro_noise, 3),
        ])
        values = axes + noise
        values[2] += self.gravity
        ax, ay, az, gx, gy, gz = (float(v) for v in values)
        return MotionSample(
            ax=ax, ay=ay, az=az,
            gx=gx, gy=gy, gz=gz,
            timestamp=t_ms,
            sensor_id=role,
        )
