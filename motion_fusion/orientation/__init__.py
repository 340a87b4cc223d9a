"""
Orientation estimation
Gradient-descent (Madgwick) AHRS, one instance per sensor stream

Usage:
    orientation = OrientationFilter(OrientationConfig(beta=0.1))
    orientation.update(gx, gy, gz, ax, ay, az)   # gyro in rad/s
    q = orientation.get_quaternion()
"""

from .config import OrientationConfig
from .filter import OrientationFilter

__all__ = [
    'OrientationConfig',
    'OrientationFilter',
]
