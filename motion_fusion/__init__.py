"""
Motion Fusion
Hand + finger dual-IMU orientation fusion, motion compensation and
pattern classification

Architecture:
- Orientation: gradient-descent quaternion filter per stream
- Conditioning: calibration, smoothing, noise gate, adaptive compensation
- Analysis: rolling-window features and rule-based pattern classification
- Pipeline: FusionOrchestrator owning all per-session state

Usage:
    orchestrator = FusionOrchestrator()
    orchestrator.start_calibration()
    for hand, finger in resting_pairs:
        orchestrator.add_calibration_sample(hand, finger)
    orchestrator.finish_calibration()

    result = orchestrator.process(hand=hand_sample, finger=finger_sample)
    print(result.quaternions, orchestrator.current_pattern)
"""

from .models import (
    CompensatedSample,
    DetectedPattern,
    FingerMovement,
    MotionMetrics,
    MotionSample,
    PatternKind,
    PatternLabel,
    Quaternion,
    SensorRole,
)
from .errors import CalibrationError, InsufficientCalibrationSamplesError
from .orientation import OrientationConfig, OrientationFilter
from .conditioning import MotionCompensator, ProcessingConfig, SensorConditioner
from .analysis import AnalysisConfig, MotionAnalyzer, PatternClassifier
from .pipeline import CycleResult, FusionOrchestrator

__all__ = [
    # Data model
    'CompensatedSample',
    'DetectedPattern',
    'FingerMovement',
    'MotionMetrics',
    'MotionSample',
    'PatternKind',
    'PatternLabel',
    'Quaternion',
    'SensorRole',

    # Errors
    'CalibrationError',
    'InsufficientCalibrationSamplesError',

    # Components
    'OrientationConfig',
    'OrientationFilter',
    'ProcessingConfig',
    'SensorConditioner',
    'MotionCompensator',
    'AnalysisConfig',
    'MotionAnalyzer',
    'PatternClassifier',

    # Pipeline
    'CycleResult',
    'FusionOrchestrator',
]

__version__ = '1.0.0'
