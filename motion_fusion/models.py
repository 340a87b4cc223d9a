"""
Motion data models
Samples, orientations and pattern records shared by every processing stage
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np
from scipy.spatial.transform import Rotation


class SensorRole(str, Enum):
    """Physical mounting point of a sensor"""
    HAND = 'hand'
    FINGER = 'finger'


class PatternLabel(str, Enum):
    """Names emitted by the pattern classifier"""
    REST = 'Reposo'
    HAND = 'Movimiento de Mano'
    FINGER = 'Movimiento de Dedo'
    COORDINATED = 'Mano + Dedo Coordinado'
    SOFT = 'Movimiento Suave'
    TAP = 'Finger Tap'
    SWIPE = 'Finger Swipe'
    PINCH = 'Pinch Motion'
    ROTATION = 'Rotation Gesture'


class FingerMovement(str, Enum):
    """Sub-type of a finger-dominant (hand-compensated) movement"""
    ACTIVE_FLEXION = 'Flexión/Extensión Activa'
    ROTATION = 'Rotación del Dedo'
    SUBTLE = 'Movimiento Sutil del Dedo'
    RELATIVE_REST = 'Dedo en Reposo Relativo'


class PatternKind(str, Enum):
    """Strategy that produced a pattern"""
    THRESHOLD = 'threshold'
    GESTURE = 'gesture'
    COMBINED = 'combined'


@dataclass(frozen=True)
class MotionSample:
    """Single 6-axis IMU sample from one sensor."""
    ax: float           # acceleration x (g)
    ay: float           # acceleration y (g)
    az: float           # acceleration z (g)
    gx: float           # angular rate x (deg/s)
    gy: float           # angular rate y (deg/s)
    gz: float           # angular rate z (deg/s)
    timestamp: float    # monotonic ms
    sensor_id: SensorRole
    quality: float = 1.0

    @property
    def accel(self) -> np.ndarray:
        return np.array([self.ax, self.ay, self.az], dtype=float)

    @property
    def gyro(self) -> np.ndarray:
        return np.array([self.gx, self.gy, self.gz], dtype=float)

    @property
    def accel_magnitude(self) -> float:
        return math.sqrt(self.ax ** 2 + self.ay ** 2 + self.az ** 2)

    @property
    def gyro_magnitude(self) -> float:
        return math.sqrt(self.gx ** 2 + self.gy ** 2 + self.gz ** 2)

    def as_array(self) -> np.ndarray:
        """All six axes as ``[ax, ay, az, gx, gy, gz]``."""
        return np.array([self.ax, self.ay, self.az, self.gx, self.gy, self.gz], dtype=float)

    def with_axes(self, values) -> 'MotionSample':
        """Copy of this sample with the six axes replaced."""
        ax, ay, az, gx, gy, gz = (float(v) for v in values)
        return MotionSample(
            ax=ax, ay=ay, az=az,
            gx=gx, gy=gy, gz=gz,
            timestamp=self.timestamp,
            sensor_id=self.sensor_id,
            quality=self.quality,
        )


@dataclass(frozen=True)
class CompensatedSample:
    """
    Finger motion with the hand's contribution removed.

    Always derived from one finger sample and one hand sample of the same
    processing cycle; carries the finger sample's timestamp.
    """
    compensated_ax: float
    compensated_ay: float
    compensated_az: float
    compensated_gx: float
    compensated_gy: float
    compensated_gz: float
    timestamp: float

    @property
    def accel(self) -> np.ndarray:
        return np.array([self.compensated_ax, self.compensated_ay, self.compensated_az], dtype=float)

    @property
    def gyro(self) -> np.ndarray:
        return np.array([self.compensated_gx, self.compensated_gy, self.compensated_gz], dtype=float)

    @property
    def accel_magnitude(self) -> float:
        return float(np.linalg.norm(self.accel))

    @property
    def gyro_magnitude(self) -> float:
        return float(np.linalg.norm(self.gyro))

    def as_array(self) -> np.ndarray:
        return np.concatenate([self.accel, self.gyro])


@dataclass(frozen=True)
class Quaternion:
    """Unit quaternion ``(w, x, y, z)``."""
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> 'Quaternion':
        return cls(1.0, 0.0, 0.0, 0.0)

    @property
    def norm(self) -> float:
        return math.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.w, self.x, self.y, self.z

    def to_euler(self) -> Tuple[float, float, float]:
        """
        Convert to roll, pitch, yaw.

        Returns:
            Tuple of (roll, pitch, yaw) in degrees, extrinsic x-y-z order
        """
        # scipy expects scalar-last ordering
        rotation = Rotation.from_quat([self.x, self.y, self.z, self.w])
        roll, pitch, yaw = rotation.as_euler('xyz', degrees=True)
        return float(roll), float(pitch), float(yaw)


@dataclass(frozen=True)
class MotionMetrics:
    """Per-cycle snapshot of hand, finger and compensated motion."""
    hand_magnitude: float
    finger_magnitude: float
    compensated_magnitude: float
    correlation_coefficient: float
    independent_motion_ratio: float
    dominant_axis: str      # 'x' | 'y' | 'z'
    motion_type: str        # 'static' | 'linear' | 'rotational' | 'complex'


@dataclass(frozen=True)
class DetectedPattern:
    """Classified motion pattern. Immutable once created."""
    id: str
    name: str
    confidence: float
    timestamp: float
    duration: float
    kind: PatternKind
    characteristics: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None
