"""
Pattern Classifier
Rule-based classification of dual-sensor motion into named patterns
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Sequence

import numpy as np

from .analyzer import MotionAnalyzer, WindowAnalysis, accel_magnitudes, window_duration
from .config import AnalysisConfig
from .templates import GestureTemplate, GestureWindow, default_templates
from ..models import (
    CompensatedSample,
    DetectedPattern,
    MotionSample,
    PatternKind,
    PatternLabel,
)

logger = logging.getLogger(__name__)


def _new_pattern_id() -> str:
    return f"pattern_{uuid.uuid4().hex[:12]}"


class PatternHistory:
    """Bounded append-only log of detected patterns, oldest evicted first."""

    def __init__(self, capacity: int = 50):
        self._patterns: Deque[DetectedPattern] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._patterns.maxlen

    def append(self, pattern: DetectedPattern):
        self._patterns.append(pattern)

    def to_list(self) -> List[DetectedPattern]:
        return list(self._patterns)

    def latest(self) -> Optional[DetectedPattern]:
        return self._patterns[-1] if self._patterns else None

    def clear(self):
        self._patterns.clear()

    def __len__(self):
        return len(self._patterns)

    def __iter__(self):
        return iter(list(self._patterns))


@dataclass
class ClassificationResult:
    """Patterns emitted by one classification pass"""
    patterns: List[DetectedPattern] = field(default_factory=list)
    current: Optional[DetectedPattern] = None


class PatternClassifier:
    """
    Two coexisting strategies over the rolling windows

    - Threshold: names the dominant actor (hand or finger) once recent mean
      acceleration exceeds the activity threshold
    - Templates: tap / swipe / pinch / rotation scores, each firing above
      the gesture confidence threshold

    plus the combined energy classifier used as the fallback label
    (rest, soft, hand, coordinated, finger-dominant).

    Each pass runs combined -> threshold -> templates; the last pattern
    produced becomes the current pattern.
    """

    def __init__(
            self,
            config: Optional[AnalysisConfig] = None,
            analyzer: Optional[MotionAnalyzer] = None,
            templates: Optional[List[GestureTemplate]] = None
    ):
        """
        Initialize classifier

        Args:
            config: Analysis configuration
            analyzer: Feature extractor (built from config when omitted)
            templates: Gesture templates (the four built-ins when omitted)
        """
        self.config = config if config else AnalysisConfig()
        self.analyzer = analyzer if analyzer else MotionAnalyzer(self.config)
        self.templates = templates if templates is not None else default_templates()

        self.history = PatternHistory(self.config.history_size)
        self.current: Optional[DetectedPattern] = None

        logger.info("Pattern classifier initialized")
        logger.info(f"  Templates: {[t.name.value for t in self.templates]}")
        logger.info(f"  History capacity: {self.config.history_size}")

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def classify_threshold(
            self,
            hand: Sequence[MotionSample],
            finger: Sequence[MotionSample],
            timestamp: float
    ) -> Optional[DetectedPattern]:
        """
        Dominant-actor classification from recent mean acceleration

        Args:
            hand: Hand window
            finger: Finger window (uncompensated)
            timestamp: Cycle timestamp (ms)

        Returns:
            Hand or finger movement pattern, or None when neither stream is
            active or either has too few samples
        """
        lookback = self.config.threshold_lookback
        if len(hand) < lookback or len(finger) < lookback:
            return None

        recent_hand = list(hand)[-lookback:]
        hand_avg = float(np.mean(accel_magnitudes(recent_hand)))
        finger_avg = float(np.mean(accel_magnitudes(list(finger)[-lookback:])))

        threshold = self.config.activity_threshold
        if hand_avg <= threshold and finger_avg <= threshold:
            return None

        strongest = max(hand_avg, finger_avg)
        label = PatternLabel.HAND if hand_avg > finger_avg else PatternLabel.FINGER

        return DetectedPattern(
            id=_new_pattern_id(),
            name=label.value,
            confidence=min(strongest / self.config.activity_confidence_scale, 1.0),
            timestamp=timestamp,
            duration=window_duration(recent_hand),
            kind=PatternKind.THRESHOLD,
            characteristics={
                'hand_average': hand_avg,
                'finger_average': finger_avg,
            },
            description=f"Movement detected with magnitude {strongest:.2f}",
        )

    def classify_gestures(
            self,
            window: GestureWindow,
            analysis: Optional[WindowAnalysis],
            timestamp: float
    ) -> List[DetectedPattern]:
        """
        Score every gesture template against the current window

        Args:
            window: Samples and duration to score
            analysis: Window features; no gestures are emitted without it
            timestamp: Cycle timestamp (ms)

        Returns:
            Patterns for every template scoring above the confidence threshold
        """
        if analysis is None:
            return []

        eps = self.config.epsilon
        hand_motion = analysis.hand_motion
        finger_mean = analysis.finger_motion.mean if analysis.finger_motion else 0.0
        compensated = analysis.compensated_motion

        characteristics = {
            'hand_dominance': hand_motion.mean / (finger_mean + eps),
            'finger_independence': analysis.finger_independence,
            'spatial_complexity': analysis.spatial_complexity,
            'temporal_consistency': analysis.temporal_consistency,
            'frequency_signature': tuple(
                float(v) for v in np.concatenate([
                    analysis.hand_frequencies[:5],
                    analysis.finger_frequencies[:5],
                ])
            ),
        }
        metadata = {
            'peak_acceleration': max(hand_motion.peak, compensated.peak if compensated else 0.0),
            'average_velocity': (hand_motion.mean + (compensated.mean if compensated else 0.0)) / 2,
            'direction_changes': compensated.direction_changes if compensated else 0,
            'rhythmicity': analysis.temporal_consistency,
        }

        patterns = []
        for template in self.templates:
            score = template.score(window)
            if score > self.config.gesture_confidence_threshold:
                patterns.append(DetectedPattern(
                    id=_new_pattern_id(),
                    name=template.name.value,
                    confidence=score,
                    timestamp=timestamp,
                    duration=window.duration,
                    kind=PatternKind.GESTURE,
                    characteristics=dict(
                        characteristics,
                        gesture_type=template.kind,
                        template_profile=template.profile(),
                    ),
                    metadata=dict(metadata),
                    description=f"{template.name.value} ({score:.2f})",
                ))
        return patterns

    def classify_combined(
            self,
            hand: Sequence[MotionSample],
            compensated: Sequence[CompensatedSample],
            timestamp: float
    ) -> Optional[DetectedPattern]:
        """
        Energy-based label from hand and compensated-finger windows

        Args:
            hand: Hand window
            compensated: Compensated finger window
            timestamp: Cycle timestamp (ms)

        Returns:
            Combined pattern, or None while both windows are too short
        """
        hand_analysis = self.analyzer.stream_energy(hand)
        finger_analysis = self.analyzer.stream_energy(compensated)
        if hand_analysis is None and finger_analysis is None:
            return None

        hand_weight = self.config.hand_weight if hand_analysis else 0.0
        finger_weight = self.config.finger_weight if finger_analysis else 0.0

        hand_energy = hand_analysis.energy if hand_analysis else 0.0
        finger_energy = finger_analysis.energy if finger_analysis else 0.0
        total_energy = hand_energy + finger_energy

        if finger_energy > 1.0 and hand_energy < finger_energy * 0.5:
            name = f"Dedo: {finger_analysis.finger_movement.value}"
            confidence = min(0.95, 0.7 + finger_energy / 50)
        elif hand_energy > 20:
            if finger_energy > 5:
                name = PatternLabel.COORDINATED.value
                confidence = min(0.95, 0.8 + total_energy / 100)
            else:
                name = PatternLabel.HAND.value
                confidence = min(0.95, 0.7 + hand_energy / 100)
        elif total_energy > 5:
            name = PatternLabel.SOFT.value
            confidence = 0.6 + total_energy / 50
        else:
            name = PatternLabel.REST.value
            confidence = 0.9

        confidence = max(
            self.config.min_combined_confidence,
            min(self.config.max_combined_confidence, confidence),
        )

        return DetectedPattern(
            id=_new_pattern_id(),
            name=name,
            confidence=confidence,
            timestamp=timestamp,
            duration=window_duration(hand if hand_analysis else compensated),
            kind=PatternKind.COMBINED,
            characteristics={
                'hand_energy': hand_energy,
                'finger_energy': finger_energy,
                'hand_weight': hand_weight,
                'finger_weight': finger_weight,
                'weighted_energy': hand_weight * hand_energy + finger_weight * finger_energy,
            },
            description=f"Pattern detected with confidence {confidence:.2f}",
        )

    # ------------------------------------------------------------------
    # Per-cycle driver
    # ------------------------------------------------------------------

    def classify(
            self,
            hand: Sequence[MotionSample],
            finger: Sequence[MotionSample],
            compensated: Sequence[CompensatedSample],
            timestamp: float
    ) -> ClassificationResult:
        """
        Run all strategies on the current windows and update the history

        Args:
            hand: Hand window
            finger: Finger window (uncompensated)
            compensated: Compensated finger window
            timestamp: Cycle timestamp (ms)

        Returns:
            ClassificationResult with this pass's patterns and the current one
        """
        result = ClassificationResult()

        combined = self.classify_combined(hand, compensated, timestamp)
        if combined is not None:
            result.current = combined
            if combined.confidence > self.config.history_confidence_threshold:
                result.patterns.append(combined)

        threshold = self.classify_threshold(hand, finger, timestamp)
        if threshold is not None:
            result.current = threshold
            result.patterns.append(threshold)

        analysis = self.analyzer.analyze_window(hand, finger, compensated)
        if analysis is not None:
            window = GestureWindow(
                hand=hand,
                finger=finger,
                compensated=compensated,
                duration=analysis.duration,
            )
            gestures = self.classify_gestures(window, analysis, timestamp)
            for gesture in gestures:
                logger.info(f"Gesture detected: {gesture.name} (confidence {gesture.confidence:.2f})")
            if gestures:
                result.current = gestures[-1]
            result.patterns.extend(gestures)

        for pattern in result.patterns:
            self.history.append(pattern)
        if result.current is not None:
            self.current = result.current

        return result

    def reset(self):
        """Clear pattern history and the current pattern."""
        self.history.clear()
        self.current = None

    def __repr__(self):
        current = self.current.name if self.current else None
        return f"<PatternClassifier(current={current!r}, history={len(self.history)})>"
