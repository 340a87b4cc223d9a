"""
Motion Fusion exceptions
"""


class CalibrationError(RuntimeError):
    """Calibration was driven out of order (e.g. finished before it started)."""


class InsufficientCalibrationSamplesError(CalibrationError):
    """
    Too few samples were collected to compute calibration offsets.

    Recoverable: keep collecting and call finish_calibration() again.
    The existing calibration profile is left untouched.
    """

    def __init__(self, hand_count: int, finger_count: int, required: int):
        self.hand_count = hand_count
        self.finger_count = finger_count
        self.required = required
        super().__init__(
            f"Insufficient calibration samples: hand={hand_count}, "
            f"finger={finger_count} (need {required} each)"
        )
