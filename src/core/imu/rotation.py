"""
Rotation matrix and orientation angles from gravity and geomagnetic vectors.

The heading calculator does not own this math: it receives a rotation
provider and only asks it for a matrix and the orientation angles. On a
phone the host platform supplies the routine; this module is the default
provider used everywhere else.

Device frame: x to the right, y towards the top of the screen, z out of the
screen. World frame: x east, y magnetic north, z up.

Usage:
    provider = GravityMagneticRotation()
    R = provider.get_rotation_matrix(accel, mag)
    if R is not None:
        azimuth, pitch, roll = provider.get_orientation(R)
"""

import math
from typing import Optional, Protocol, Sequence, Tuple

import numpy as np

from utils.config import Config


class RotationProvider(Protocol):
    """Capability: device-to-world rotation from gravity + geomagnetic field."""

    def get_rotation_matrix(
        self, gravity: Sequence[float], geomagnetic: Sequence[float]
    ) -> Optional[np.ndarray]:
        ...

    def get_orientation(self, rotation_matrix: np.ndarray) -> Tuple[float, float, float]:
        ...


class GravityMagneticRotation:
    """Default rotation provider built on numpy cross products."""

    def __init__(
        self,
        free_fall_gravity_squared: float = Config.FREE_FALL_GRAVITY_SQUARED,
        min_horizontal_norm: float = Config.MIN_HORIZONTAL_FIELD_NORM,
    ) -> None:
        self.free_fall_gravity_squared = free_fall_gravity_squared
        self.min_horizontal_norm = min_horizontal_norm

    def get_rotation_matrix(
        self, gravity: Sequence[float], geomagnetic: Sequence[float]
    ) -> Optional[np.ndarray]:
        """
        Build the 3x3 device-to-world rotation matrix.

        Args:
            gravity: [ax, ay, az] accelerometer reading in m/s²
            geomagnetic: [mx, my, mz] magnetometer reading in μT

        Returns:
            Rows (east, north, up) expressed in device coordinates, or None
            when the device is in free fall or the field is parallel to gravity.
        """
        a = np.asarray(gravity, dtype=float)[:3]
        e = np.asarray(geomagnetic, dtype=float)[:3]

        norm_sq_a = float(np.dot(a, a))
        if not np.isfinite(norm_sq_a) or norm_sq_a < self.free_fall_gravity_squared:
            return None

        h = np.cross(e, a)
        norm_h = float(np.linalg.norm(h))
        if not np.isfinite(norm_h) or norm_h < self.min_horizontal_norm:
            return None

        h = h / norm_h
        a = a / math.sqrt(norm_sq_a)
        m = np.cross(a, h)

        return np.vstack((h, m, a))

    def get_orientation(self, rotation_matrix: np.ndarray) -> Tuple[float, float, float]:
        """
        Orientation angles from a rotation matrix.

        Returns:
            (azimuth, pitch, roll) in radians. Azimuth is in [-π, π], 0 = north.
        """
        r = np.asarray(rotation_matrix, dtype=float).reshape(3, 3)
        azimuth = math.atan2(r[0, 1], r[1, 1])
        pitch = math.asin(max(-1.0, min(1.0, -r[2, 1])))
        roll = math.atan2(-r[2, 0], r[2, 2])
        return azimuth, pitch, roll
