"""
Motion Fusion - Dual-Sensor Pipeline
=====================================
Central object that owns all mutable state of the hand/finger fusion core.

Usage:
    orchestrator = FusionOrchestrator()
    result = orchestrator.process(hand=hand_sample, finger=finger_sample)
    result.quaternions['compensated'], orchestrator.current_pattern

Per-cycle flow:
    raw pair -> SensorConditioner (hand, finger)
             -> MotionCompensator (only when both samples are present)
             -> OrientationFilter x3 (hand, finger, compensated)
             -> rolling windows -> MotionAnalyzer -> PatternClassifier

Failure policy:
    Nothing in a cycle is fatal. A silent sensor skips its own steps and
    compensation for that cycle; degenerate input keeps the last valid
    orientation; short windows simply produce no pattern.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .analysis.analyzer import MotionAnalyzer
from .analysis.classifier import PatternClassifier
from .analysis.config import AnalysisConfig
from .conditioning.compensator import MotionCompensator
from .conditioning.conditioner import SensorConditioner
from .conditioning.config import ProcessingConfig
from .coordinator.clock import MonotonicClock
from .coordinator.window import MotionWindow
from .errors import InsufficientCalibrationSamplesError
from .models import (
    CompensatedSample,
    DetectedPattern,
    MotionMetrics,
    MotionSample,
    Quaternion,
    SensorRole,
)
from .orientation.config import OrientationConfig
from .orientation.filter import OrientationFilter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stream labels - keys of quaternion / window dictionaries
# ---------------------------------------------------------------------------
STREAM_HAND        = 'hand'
STREAM_FINGER      = 'finger'
STREAM_COMPENSATED = 'compensated'

STREAMS = (STREAM_HAND, STREAM_FINGER, STREAM_COMPENSATED)

# Sample-rate statistics window (ms)
RATE_WINDOW_MS = 2000.0


@dataclass
class CycleResult:
    """Everything one processing cycle produced"""
    hand: Optional[MotionSample] = None
    finger: Optional[MotionSample] = None
    compensated: Optional[CompensatedSample] = None
    quaternions: Dict[str, Optional[Quaternion]] = field(default_factory=dict)
    metrics: Optional[MotionMetrics] = None
    patterns: List[DetectedPattern] = field(default_factory=list)
    current_pattern: Optional[DetectedPattern] = None


class FusionOrchestrator:
    """
    Owns the full per-sample processing chain for one hand/finger pair.

    Responsibilities:
      - Condition each incoming sample and compensate the finger
      - Keep one orientation filter per stream (hand, finger, compensated)
      - Maintain the rolling windows feeding analysis and classification
      - Expose the calibration and configuration control surface
      - Report stream statistics via get_status()

    All public methods are serialised on a single re-entrant lock, so reset,
    calibration and config changes never interleave with a sample in flight.
    """

    def __init__(
        self,
        processing_config: Optional[ProcessingConfig] = None,
        orientation_config: Optional[OrientationConfig] = None,
        analysis_config: Optional[AnalysisConfig] = None,
        clock: Optional[MonotonicClock] = None,
    ):
        """
        Args:
            processing_config  : Calibration / smoothing / gating / compensation
            orientation_config : Filter gain and integration-step bounds
            analysis_config    : Window sizes and classifier thresholds
            clock              : Time base for filters fed without timestamps
        """
        self._lock = threading.RLock()

        self.processing_config = processing_config or ProcessingConfig.for_realtime()
        self.orientation_config = orientation_config or OrientationConfig()
        self.analysis_config = analysis_config or AnalysisConfig.for_realtime()
        self.clock = clock or MonotonicClock()

        self.conditioner = SensorConditioner(self.processing_config)
        self.compensator = MotionCompensator(self.processing_config)
        self.analyzer = MotionAnalyzer(self.analysis_config)
        self.classifier = PatternClassifier(self.analysis_config, analyzer=self.analyzer)

        # One filter and one window per stream
        self.filters: Dict[str, OrientationFilter] = {
            stream: OrientationFilter(self.orientation_config, clock=self.clock, name=stream)
            for stream in STREAMS
        }
        self.windows: Dict[str, MotionWindow] = {
            stream: MotionWindow(self.analysis_config.window_size)
            for stream in STREAMS
        }

        self._quaternions: Dict[str, Optional[Quaternion]] = {stream: None for stream in STREAMS}
        self._metrics: Optional[MotionMetrics] = None

        # Stream statistics
        self._cycle_count = 0
        self._last_timestamp: Optional[float] = None
        self._recent_timestamps: deque = deque()

        logger.info("FusionOrchestrator created")
        logger.info(f"  Window: {self.analysis_config.window_size} samples | "
                    f"beta: {self.orientation_config.beta} | "
                    f"compensation: {self.processing_config.compensation_factor}")

    # -----------------------------------------------------------------------
    # Public API - per-sample cycle
    # -----------------------------------------------------------------------

    def process(
        self,
        hand: Optional[MotionSample] = None,
        finger: Optional[MotionSample] = None,
    ) -> CycleResult:
        """
        Run one full cycle for a hand/finger sample pair.

        Either sample may be None when that sensor was silent this cycle;
        compensation and the compensated stream are then skipped.

        Args:
            hand   : Hand sample (sensor_id must be HAND)
            finger : Finger sample (sensor_id must be FINGER)

        Returns:
            CycleResult for this cycle

        Raises:
            ValueError: If a sample carries the wrong sensor role
        """
        self._check_role(hand, SensorRole.HAND)
        self._check_role(finger, SensorRole.FINGER)

        with self._lock:
            result = CycleResult()

            if hand is None and finger is None:
                logger.debug("Empty cycle - no sensor data")
                result.quaternions = dict(self._quaternions)
                result.current_pattern = self.classifier.current
                return result

            if hand is not None:
                result.hand = self._advance_stream(STREAM_HAND, hand)

            if finger is not None:
                result.finger = self._advance_stream(STREAM_FINGER, finger)

            if result.hand is not None and result.finger is not None:
                compensated = self.compensator.compensate(result.finger, result.hand)
                self.filters[STREAM_COMPENSATED].update_from_sample(compensated)
                self._quaternions[STREAM_COMPENSATED] = self.filters[STREAM_COMPENSATED].get_quaternion()
                self.windows[STREAM_COMPENSATED].push(compensated)

                self._metrics = self.analyzer.motion_metrics(result.hand, result.finger, compensated)
                result.compensated = compensated
                result.metrics = self._metrics

            timestamp = max(s.timestamp for s in (hand, finger) if s is not None)
            classification = self.classifier.classify(
                self.windows[STREAM_HAND].snapshot(),
                self.windows[STREAM_FINGER].snapshot(),
                self.windows[STREAM_COMPENSATED].snapshot(),
                timestamp,
            )

            self._record_cycle(timestamp)

            result.quaternions = dict(self._quaternions)
            result.patterns = classification.patterns
            result.current_pattern = self.classifier.current
            return result

    # -----------------------------------------------------------------------
    # Public API - outputs
    # -----------------------------------------------------------------------

    def get_quaternions(self) -> Dict[str, Optional[Quaternion]]:
        """Latest orientation per stream (None until the stream has data)."""
        with self._lock:
            return dict(self._quaternions)

    @property
    def current_pattern(self) -> Optional[DetectedPattern]:
        with self._lock:
            return self.classifier.current

    @property
    def pattern_history(self) -> List[DetectedPattern]:
        with self._lock:
            return self.classifier.history.to_list()

    @property
    def metrics(self) -> Optional[MotionMetrics]:
        with self._lock:
            return self._metrics

    # -----------------------------------------------------------------------
    # Public API - control surface
    # -----------------------------------------------------------------------

    def reset(self):
        """
        Clear filters, windows, smoothing buffers, pattern history and
        statistics. Calibration is preserved.
        """
        with self._lock:
            for orientation in self.filters.values():
                orientation.reset()
            for window in self.windows.values():
                window.clear()
            self.conditioner.reset_buffers()
            self.classifier.reset()

            self._quaternions = {stream: None for stream in STREAMS}
            self._metrics = None
            self._cycle_count = 0
            self._last_timestamp = None
            self._recent_timestamps.clear()

            logger.info("✓ Fusion state reset (calibration kept)")

    def start_calibration(self):
        """Begin collecting resting samples for offset estimation."""
        with self._lock:
            self.conditioner.start_calibration()

    def add_calibration_sample(
        self,
        hand: Optional[MotionSample] = None,
        finger: Optional[MotionSample] = None,
    ):
        """Buffer a raw sample pair for calibration."""
        with self._lock:
            self.conditioner.add_calibration_sample(hand, finger)

    def finish_calibration(self) -> bool:
        """
        Compute offsets from the collected samples.

        Returns:
            True on success; False when too few samples were collected
            (collection continues and the previous profile stays active)
        """
        with self._lock:
            try:
                self.conditioner.finish_calibration()
                return True
            except InsufficientCalibrationSamplesError as e:
                logger.warning(f"⚠ Calibration not applied - {e}")
                return False

    def reset_calibration(self):
        """Discard the calibration profile."""
        with self._lock:
            self.conditioner.reset_calibration()

    def update_config(self, **changes) -> ProcessingConfig:
        """
        Change compensation factor, smoothing window, noise threshold or
        calibration switch.

        Args:
            **changes: ProcessingConfig fields to replace

        Returns:
            The new ProcessingConfig

        Raises:
            ValueError: On unknown fields or invalid values
        """
        with self._lock:
            new_config = self.processing_config.updated(**changes)
            resized = new_config.smoothing_window != self.processing_config.smoothing_window

            self.processing_config = new_config
            self.conditioner.config = new_config
            self.compensator.config = new_config
            if resized:
                self.conditioner.resize(new_config.smoothing_window)

            logger.info(f"Processing config updated: {changes}")
            return new_config

    def get_status(self) -> dict:
        """
        Return a summary of stream state for logging / UI display.
        """
        with self._lock:
            frequency = len(self._recent_timestamps) / (RATE_WINDOW_MS / 1000.0)
            current = self.classifier.current
            logged = self.classifier.history.latest()
            latest_samples = {stream: window.latest() for stream, window in self.windows.items()}
            return {
                'cycles'          : self._cycle_count,
                'frequency_hz'    : frequency,
                'is_active'       : frequency > 0,
                'last_update_ms'  : self._last_timestamp,
                'stream_last_ms'  : {
                    stream: sample.timestamp if sample is not None else None
                    for stream, sample in latest_samples.items()
                },
                'calibration'     : self.conditioner.calibration_state.value,
                'is_calibrated'   : self.conditioner.profile.is_calibrated,
                'window_fill'     : {stream: len(window) for stream, window in self.windows.items()},
                'current_pattern' : current.name if current else None,
                'last_logged'     : logged.name if logged else None,
                'patterns_logged' : len(self.classifier.history),
                'clock'           : self.clock.get_stats(),
            }

    # -----------------------------------------------------------------------
    # Private helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _check_role(sample: Optional[MotionSample], role: SensorRole):
        if sample is not None and sample.sensor_id != role:
            raise ValueError(
                f"Expected a {role.value} sample, got sensor_id={sample.sensor_id!r}"
            )

    def _advance_stream(self, stream: str, sample: MotionSample) -> MotionSample:
        """Condition a sample, update its orientation filter and window."""
        conditioned = self.conditioner.condition(sample)
        self.filters[stream].update_from_sample(conditioned)
        self._quaternions[stream] = self.filters[stream].get_quaternion()
        self.windows[stream].push(conditioned)
        return conditioned

    def _record_cycle(self, timestamp: float):
        self._cycle_count += 1
        self._last_timestamp = timestamp
        self._recent_timestamps.append(timestamp)
        while self._recent_timestamps and timestamp - self._recent_timestamps[0] >= RATE_WINDOW_MS:
            self._recent_timestamps.popleft()

    def __repr__(self):
        return (
            f"<FusionOrchestrator("
            f"cycles={self._cycle_count}, "
            f"calibration={self.conditioner.calibration_state.value})>"
        )
