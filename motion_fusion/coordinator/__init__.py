"""
Motion Fusion coordination primitives
Shared time base and rolling sample windows
"""

from .clock import MonotonicClock
from .window import MotionWindow

__all__ = [
    'MonotonicClock',
    'MotionWindow',
]
