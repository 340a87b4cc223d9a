"""
Motion Analyzer
Statistical, periodicity and spatial features over rolling sample windows
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Union

import numpy as np

from .config import AnalysisConfig
from ..models import CompensatedSample, FingerMovement, MotionMetrics, MotionSample

logger = logging.getLogger(__name__)

Sample = Union[MotionSample, CompensatedSample]


@dataclass(frozen=True)
class MagnitudeStats:
    """Acceleration-magnitude statistics of one window"""
    mean: float
    peak: float
    variance: float
    direction_changes: int


@dataclass(frozen=True)
class StreamAnalysis:
    """Accel and gyro magnitude statistics plus energy of one stream"""
    accel_stats: Dict[str, float]
    gyro_stats: Dict[str, float]
    accel_frequencies: np.ndarray
    gyro_frequencies: np.ndarray
    energy: float
    finger_movement: Optional[FingerMovement] = None


@dataclass(frozen=True)
class WindowAnalysis:
    """Feature set shared by the gesture templates"""
    hand_motion: MagnitudeStats
    finger_motion: Optional[MagnitudeStats]
    compensated_motion: Optional[MagnitudeStats]
    correlation: float
    hand_frequencies: np.ndarray
    finger_frequencies: np.ndarray
    spatial_complexity: float
    temporal_consistency: float
    finger_independence: float
    duration: float
    extras: Dict[str, float] = field(default_factory=dict)


def accel_matrix(samples: Sequence[Sample]) -> np.ndarray:
    """N x 3 acceleration array for raw or compensated samples."""
    if not samples:
        return np.zeros((0, 3))
    return np.array([s.accel for s in samples], dtype=float)


def gyro_matrix(samples: Sequence[Sample]) -> np.ndarray:
    """N x 3 angular-rate array for raw or compensated samples."""
    if not samples:
        return np.zeros((0, 3))
    return np.array([s.gyro for s in samples], dtype=float)


def accel_magnitudes(samples: Sequence[Sample]) -> np.ndarray:
    return np.linalg.norm(accel_matrix(samples), axis=1)


def gyro_magnitudes(samples: Sequence[Sample]) -> np.ndarray:
    return np.linalg.norm(gyro_matrix(samples), axis=1)


def window_duration(samples: Sequence[Sample]) -> float:
    """Time span of a window in milliseconds (0 for fewer than two samples)."""
    if len(samples) < 2:
        return 0.0
    return float(samples[-1].timestamp - samples[0].timestamp)


def autocorrelation_spectrum(signal: np.ndarray, max_period: int = 20) -> np.ndarray:
    """
    Mean lag-autocorrelation for each period from 2 to min(N/2, max_period)

    Not a Fourier transform: a lightweight periodicity proxy.

    Args:
        signal: 1-D magnitude sequence
        max_period: Largest lag considered

    Returns:
        Array where element k holds the value for period k + 2
    """
    n = len(signal)
    last_period = int(min(n / 2, max_period))
    values = []
    for period in range(2, last_period + 1):
        count = n - period
        values.append(float(np.dot(signal[:count], signal[period:])) / count)
    return np.array(values, dtype=float)


def _basic_stats(values: np.ndarray) -> Dict[str, float]:
    mean = float(np.mean(values))
    maximum = float(np.max(values))
    minimum = float(np.min(values))
    return {
        'mean': mean,
        'variance': float(np.var(values)),
        'max': maximum,
        'min': minimum,
        'range': maximum - minimum,
    }


class MotionAnalyzer:
    """
    Feature extraction over rolling windows of hand, finger and
    compensated-finger samples

    Every operation requires config.min_samples samples; shorter windows get
    a neutral result (None, 0.0 or an empty array) rather than an error.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize analyzer

        Args:
            config: Analysis configuration
        """
        self.config = config if config else AnalysisConfig()

    def _enough(self, samples: Sequence[Sample], minimum: Optional[int] = None) -> bool:
        return len(samples) >= (minimum if minimum is not None else self.config.min_samples)

    # ------------------------------------------------------------------
    # Window features
    # ------------------------------------------------------------------

    def magnitude_stats(self, samples: Sequence[Sample]) -> Optional[MagnitudeStats]:
        """
        Mean, peak and variance of accel magnitude, plus direction changes

        A direction change is counted whenever the XY heading atan2(ay, ax)
        of consecutive samples differs by more than direction_change_angle.

        Args:
            samples: Raw or compensated samples

        Returns:
            MagnitudeStats, or None for insufficient data
        """
        if not self._enough(samples):
            return None

        accel = accel_matrix(samples)
        magnitudes = np.linalg.norm(accel, axis=1)
        headings = np.arctan2(accel[:, 1], accel[:, 0])
        changes = int(np.sum(np.abs(np.diff(headings)) > self.config.direction_change_angle))

        return MagnitudeStats(
            mean=float(np.mean(magnitudes)),
            peak=float(np.max(magnitudes)),
            variance=float(np.var(magnitudes)),
            direction_changes=changes,
        )

    def correlation(self, hand: Sequence[Sample], finger: Sequence[Sample]) -> float:
        """
        Pearson correlation of hand and finger accel magnitudes

        Args:
            hand: Hand window
            finger: Finger window of the same length

        Returns:
            Coefficient in [-1, 1]; 0.0 for unequal lengths, short windows or
            zero variance
        """
        if len(hand) != len(finger) or not self._enough(hand):
            return 0.0

        hand_mag = accel_magnitudes(hand)
        finger_mag = accel_magnitudes(finger)
        hand_diff = hand_mag - hand_mag.mean()
        finger_diff = finger_mag - finger_mag.mean()

        denominator = np.sqrt(np.sum(hand_diff ** 2) * np.sum(finger_diff ** 2))
        if denominator == 0:
            return 0.0
        return float(np.sum(hand_diff * finger_diff) / denominator)

    def coarse_frequency_spectrum(self, samples: Sequence[Sample]) -> np.ndarray:
        """
        Autocorrelation periodicity proxy of accel magnitude

        Args:
            samples: Raw or compensated samples

        Returns:
            Array indexed by period - 2; empty for insufficient data
        """
        if not self._enough(samples):
            return np.array([], dtype=float)
        return autocorrelation_spectrum(accel_magnitudes(samples), self.config.max_period)

    def spatial_complexity(self, compensated: Sequence[Sample]) -> float:
        """
        Path length over straight-line displacement in accel space

        Args:
            compensated: Compensated finger window

        Returns:
            Ratio >= 1 for a moving path; 0.0 when the first and last samples
            coincide (stationary or looping path) or data is insufficient
        """
        if not self._enough(compensated):
            return 0.0

        accel = accel_matrix(compensated)
        path_length = float(np.sum(np.linalg.norm(np.diff(accel, axis=0), axis=1)))
        displacement = float(np.linalg.norm(accel[-1] - accel[0]))

        if displacement == 0:
            return 0.0
        return path_length / displacement

    def temporal_consistency(self, compensated: Sequence[Sample]) -> float:
        """
        Steadiness of motion: max(0, 1 - variance / (mean + epsilon))

        Args:
            compensated: Compensated finger window

        Returns:
            Value in [0, 1]; higher is steadier. 0.0 for insufficient data.
        """
        if not self._enough(compensated):
            return 0.0

        magnitudes = accel_magnitudes(compensated)
        mean = float(np.mean(magnitudes))
        variance = float(np.var(magnitudes))
        return max(0.0, 1 - variance / (mean + self.config.epsilon))

    # ------------------------------------------------------------------
    # Aggregate analyses
    # ------------------------------------------------------------------

    def analyze_window(
            self,
            hand: Sequence[MotionSample],
            finger: Sequence[MotionSample],
            compensated: Sequence[CompensatedSample]
    ) -> Optional[WindowAnalysis]:
        """
        Full feature set for the gesture templates

        Args:
            hand: Hand window
            finger: Raw (uncompensated) finger window
            compensated: Compensated finger window

        Returns:
            WindowAnalysis, or None while the hand window is too short
        """
        hand_motion = self.magnitude_stats(hand)
        if hand_motion is None:
            return None

        finger_motion = self.magnitude_stats(finger)
        compensated_motion = self.magnitude_stats(compensated)

        finger_mean = finger_motion.mean if finger_motion else 0.0
        compensated_mean = compensated_motion.mean if compensated_motion else 0.0

        return WindowAnalysis(
            hand_motion=hand_motion,
            finger_motion=finger_motion,
            compensated_motion=compensated_motion,
            correlation=self.correlation(hand, finger),
            hand_frequencies=self.coarse_frequency_spectrum(hand),
            finger_frequencies=self.coarse_frequency_spectrum(compensated),
            spatial_complexity=self.spatial_complexity(compensated),
            temporal_consistency=self.temporal_consistency(compensated),
            finger_independence=compensated_mean / (finger_mean + self.config.epsilon),
            duration=window_duration(compensated if compensated else hand),
        )

    def stream_energy(self, samples: Sequence[Sample]) -> Optional[StreamAnalysis]:
        """
        Accel/gyro magnitude statistics and energy of one stream

        Energy is the sum of the accel and gyro magnitude variances.
        Compensated windows additionally get a finger movement sub-type.

        Args:
            samples: Hand or compensated finger window

        Returns:
            StreamAnalysis, or None below combined_min_samples
        """
        if not self._enough(samples, self.config.combined_min_samples):
            return None

        accel_mag = accel_magnitudes(samples)
        gyro_mag = gyro_magnitudes(samples)
        accel_stats = _basic_stats(accel_mag)
        gyro_stats = _basic_stats(gyro_mag)

        movement = None
        if isinstance(samples[0], CompensatedSample):
            movement = self.classify_finger_movement(accel_stats['mean'], gyro_stats['mean'])

        return StreamAnalysis(
            accel_stats=accel_stats,
            gyro_stats=gyro_stats,
            accel_frequencies=autocorrelation_spectrum(accel_mag, self.config.max_period),
            gyro_frequencies=autocorrelation_spectrum(gyro_mag, self.config.max_period),
            energy=accel_stats['variance'] + gyro_stats['variance'],
            finger_movement=movement,
        )

    @staticmethod
    def classify_finger_movement(mean_accel: float, mean_gyro: float) -> FingerMovement:
        """Sub-type of hand-compensated finger motion from mean magnitudes."""
        if mean_accel > 2.0:
            return FingerMovement.ACTIVE_FLEXION
        elif mean_gyro > 30:
            return FingerMovement.ROTATION
        elif mean_accel > 0.5:
            return FingerMovement.SUBTLE
        else:
            return FingerMovement.RELATIVE_REST

    def motion_metrics(
            self,
            hand: MotionSample,
            finger: MotionSample,
            compensated: CompensatedSample
    ) -> MotionMetrics:
        """
        Instantaneous snapshot of one processing cycle

        Args:
            hand: Conditioned hand sample
            finger: Conditioned finger sample
            compensated: Compensated finger sample of the same cycle

        Returns:
            MotionMetrics
        """
        hand_magnitude = hand.accel_magnitude
        finger_magnitude = finger.accel_magnitude
        compensated_magnitude = compensated.accel_magnitude

        # Directional agreement of the accel vectors
        denominator = hand_magnitude * finger_magnitude
        correlation = float(np.dot(hand.accel, finger.accel) / denominator) if denominator > 0 else 0.0

        independent_ratio = compensated_magnitude / (finger_magnitude + self.config.epsilon)

        dominant_axis = 'xyz'[int(np.argmax(np.abs(compensated.accel)))]

        gyro_magnitude = hand.gyro_magnitude
        if hand_magnitude < 0.1 and compensated_magnitude < 0.1:
            motion_type = 'static'
        elif gyro_magnitude > hand_magnitude * 10:
            motion_type = 'rotational'
        elif compensated_magnitude > hand_magnitude * 0.5:
            motion_type = 'complex'
        else:
            motion_type = 'linear'

        return MotionMetrics(
            hand_magnitude=hand_magnitude,
            finger_magnitude=finger_magnitude,
            compensated_magnitude=compensated_magnitude,
            correlation_coefficient=correlation,
            independent_motion_ratio=independent_ratio,
            dominant_axis=dominant_axis,
            motion_type=motion_type,
        )
