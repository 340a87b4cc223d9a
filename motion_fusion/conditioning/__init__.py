"""
Signal conditioning for the hand and finger sensors

- SensorConditioner: calibration offsets, smoothing, dead-zone gating
- MotionCompensator: adaptive subtraction of hand motion from the finger
"""

from .config import ProcessingConfig
from .conditioner import CalibrationProfile, CalibrationState, SensorConditioner
from .compensator import MotionCompensator

__all__ = [
    'ProcessingConfig',
    'CalibrationProfile',
    'CalibrationState',
    'SensorConditioner',
    'MotionCompensator',
]
