"""
Motion Compensator
Removes the hand's motion from the finger sensor to isolate finger movement
"""

import logging
from typing import Optional

from .config import ProcessingConfig
from ..models import CompensatedSample, MotionSample

logger = logging.getLogger(__name__)

MIN_ADAPTIVE_FACTOR = 0.5
MAX_ADAPTIVE_FACTOR = 1.0


class MotionCompensator:
    """
    Adaptive hand-motion subtraction

    The hand's contribution is scaled by an adaptive factor that grows with
    the hand's acceleration magnitude and is bounded to [0.5, 1.0], so a
    still hand is only partially removed and a vigorous one fully removed.

    Stateless: identical inputs always give identical output.
    """

    def __init__(self, config: Optional[ProcessingConfig] = None):
        self.config = config if config else ProcessingConfig()

    @property
    def base_factor(self) -> float:
        return self.config.compensation_factor

    def adaptive_factor(self, hand: MotionSample) -> float:
        """
        Compensation scale for a hand sample

        Args:
            hand: Conditioned hand sample

        Returns:
            base_factor * (1 + |accel| / 10), clamped to [0.5, 1.0]
        """
        factor = self.base_factor * (1 + hand.accel_magnitude / 10)
        return min(MAX_ADAPTIVE_FACTOR, max(MIN_ADAPTIVE_FACTOR, factor))

    def compensate(self, finger: MotionSample, hand: MotionSample) -> CompensatedSample:
        """
        Finger motion relative to the hand

        Args:
            finger: Conditioned finger sample
            hand: Conditioned hand sample from the same cycle

        Returns:
            CompensatedSample stamped with the finger sample's timestamp
        """
        factor = self.adaptive_factor(hand)
        ax, ay, az, gx, gy, gz = finger.as_array() - hand.as_array() * factor

        return CompensatedSample(
            compensated_ax=float(ax),
            compensated_ay=float(ay),
            compensated_az=float(az),
            compensated_gx=float(gx),
            compensated_gy=float(gy),
            compensated_gz=float(gz),
            timestamp=finger.timestamp,
        )
