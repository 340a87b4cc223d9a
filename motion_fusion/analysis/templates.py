"""
Gesture templates
Scoring functions for tap, swipe, pinch and rotation gestures
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence, Tuple

import numpy as np

from .analyzer import accel_magnitudes, accel_matrix, gyro_magnitudes
from ..models import CompensatedSample, MotionSample, PatternLabel

EPSILON = 0.001


@dataclass(frozen=True)
class GestureWindow:
    """Samples a template is scored against; duration in milliseconds."""
    hand: Sequence[MotionSample]
    finger: Sequence[MotionSample]
    compensated: Sequence[CompensatedSample]
    duration: float


def score_tap(window: GestureWindow) -> float:
    """
    Tap: sharp compensated peak, short duration

    Score is the mean of the peak-to-average ratio (scaled by 1/5) and a
    duration term that is 1 below 500 ms and decays to 0 at 1500 ms.
    """
    if len(window.compensated) < 5:
        return 0.0

    magnitudes = accel_magnitudes(window.compensated)
    peak = float(np.max(magnitudes))
    average = float(np.mean(magnitudes))

    peak_ratio = peak / (average + EPSILON)
    if window.duration < 500:
        duration_score = 1.0
    else:
        duration_score = max(0.0, 1 - (window.duration - 500) / 1000)

    return min(1.0, (peak_ratio / 5 + duration_score) / 2)


def score_swipe(window: GestureWindow) -> float:
    """
    Swipe: compensated acceleration keeps changing in one direction

    Consistency is the magnitude of the summed step vectors over the number
    of steps; halved outside the 200-1000 ms band.
    """
    if len(window.compensated) < 10:
        return 0.0

    deltas = np.diff(accel_matrix(window.compensated), axis=0)
    consistency = float(np.linalg.norm(deltas.sum(axis=0))) / len(deltas)
    duration_score = 1.0 if 200 < window.duration < 1000 else 0.5

    return min(1.0, consistency * duration_score)


def score_pinch(window: GestureWindow) -> float:
    """
    Pinch: moderate hand motion with controlled finger motion

    Coordination is min(hand mean / 2, finger mean / 1.5); requires more than
    300 ms and favours durations up to 2000 ms.
    """
    if len(window.hand) < 15 or len(window.compensated) < 15:
        return 0.0

    hand_avg = float(np.mean(accel_magnitudes(window.hand)))
    finger_avg = float(np.mean(accel_magnitudes(window.compensated)))

    coordination = min(hand_avg / 2, finger_avg / 1.5)
    duration_score = min(1.0, 2000 / window.duration) if window.duration > 300 else 0.0

    return min(1.0, coordination * duration_score)


def score_rotation(window: GestureWindow) -> float:
    """
    Rotation: hand gyroscope dominates hand acceleration

    Requires more than 500 ms and favours durations up to 3000 ms.
    """
    if len(window.hand) < 20:
        return 0.0

    avg_gyro = float(np.mean(gyro_magnitudes(window.hand)))
    avg_accel = float(np.mean(accel_magnitudes(window.hand)))

    rotation_ratio = avg_gyro / (avg_accel * 10 + 1)
    duration_score = min(1.0, 3000 / window.duration) if window.duration > 500 else 0.0

    return min(1.0, rotation_ratio * duration_score)


@dataclass(frozen=True)
class GestureTemplate:
    """Named gesture with its nominal feature ranges and scoring function"""
    name: PatternLabel
    kind: str
    min_duration: float
    max_duration: float
    hand_motion_threshold: float
    finger_motion_threshold: float
    correlation_range: Tuple[float, float]
    frequency_bands: Tuple[float, ...]
    scorer: Callable[[GestureWindow], float] = field(compare=False)

    def score(self, window: GestureWindow) -> float:
        return self.scorer(window)

    def profile(self) -> Dict[str, Any]:
        """
        Nominal ranges of the gesture, attached to every pattern it emits.

        Returns:
            dict of duration (ms), motion thresholds (g), correlation range
            and frequency bands (Hz)
        """
        return {
            'duration_range': (self.min_duration, self.max_duration),
            'hand_motion_threshold': self.hand_motion_threshold,
            'finger_motion_threshold': self.finger_motion_threshold,
            'correlation_range': self.correlation_range,
            'frequency_bands': self.frequency_bands,
        }


def default_templates() -> List[GestureTemplate]:
    """The four built-in gesture templates."""
    return [
        GestureTemplate(
            name=PatternLabel.TAP,
            kind='tap',
            min_duration=100,
            max_duration=500,
            hand_motion_threshold=0.5,
            finger_motion_threshold=2.0,
            correlation_range=(-0.3, 0.3),
            frequency_bands=(5, 15, 25),
            scorer=score_tap,
        ),
        GestureTemplate(
            name=PatternLabel.SWIPE,
            kind='swipe',
            min_duration=200,
            max_duration=1000,
            hand_motion_threshold=1.0,
            finger_motion_threshold=3.0,
            correlation_range=(0.3, 0.8),
            frequency_bands=(2, 8, 12),
            scorer=score_swipe,
        ),
        GestureTemplate(
            name=PatternLabel.PINCH,
            kind='pinch',
            min_duration=300,
            max_duration=2000,
            hand_motion_threshold=0.8,
            finger_motion_threshold=1.5,
            correlation_range=(0.5, 0.9),
            frequency_bands=(1, 4, 8),
            scorer=score_pinch,
        ),
        GestureTemplate(
            name=PatternLabel.ROTATION,
            kind='rotation',
            min_duration=500,
            max_duration=3000,
            hand_motion_threshold=2.0,
            finger_motion_threshold=1.0,
            correlation_range=(0.6, 0.95),
            frequency_bands=(0.5, 2, 4),
            scorer=score_rotation,
        ),
    ]
