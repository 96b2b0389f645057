"""
Compass heading from accelerometer + magnetometer readings.

This module turns the latest pair of raw sensor vectors into a heading in
degrees and a coarse eight-way compass direction. It is a stateless
transformation: the rotation math is delegated to an injected rotation
provider and the result is handed straight to the caller.

Direction bins (first match wins, closed intervals):
- N:  [0, 10] and [350, 360)
- NE: (10, 80]    E: (80, 100]    SE: (100, 170]   S: (170, 190]
- SW: (190, 260]  W: (260, 280]   NW: (280, 350)

Usage:
    calculator = HeadingCalculator()
    heading = calculator.compute_heading(accel, mag)
    if heading is not None:
        direction = calculator.classify_direction(heading)
"""

import math
from typing import List, Literal, NamedTuple, Optional, Tuple

from core.imu.rotation import GravityMagneticRotation, RotationProvider
from core.imu.sensor_types import Vector3
from utils.config import Config

import logging
log = logging.getLogger("compas.service")

DirectionLabel = Literal["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


class DirectionSector(NamedTuple):
    lower: float
    upper: float
    label: DirectionLabel


# N sectors come first so that 350 is owned by N and not NW.
DIRECTION_SECTORS: Tuple[DirectionSector, ...] = (
    DirectionSector(0.0, 10.0, "N"),
    DirectionSector(350.0, 360.0, "N"),
    DirectionSector(10.0, 80.0, "NE"),
    DirectionSector(80.0, 100.0, "E"),
    DirectionSector(100.0, 170.0, "SE"),
    DirectionSector(170.0, 190.0, "S"),
    DirectionSector(190.0, 260.0, "SW"),
    DirectionSector(260.0, 280.0, "W"),
    DirectionSector(280.0, 350.0, "NW"),
)

DIRECTION_LABELS: List[str] = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


def normalize_azimuth(azimuth_rad: float, decimals: int = Config.HEADING_DECIMALS) -> float:
    """
    Convert an azimuth in radians to a heading in [0, 360) degrees.

    Rounds like the display does (round half to even on the scaled value).
    A value that rounds up to 360.0 wraps to 0.0.
    """
    degrees = (math.degrees(azimuth_rad) + 360.0) % 360.0
    scale = 10 ** decimals
    heading = round(degrees * scale) / scale
    if heading >= 360.0:
        heading -= 360.0
    return heading


class HeadingCalculator:
    """Stateless heading + direction computation for one sensor sample."""

    def __init__(self, rotation_provider: Optional[RotationProvider] = None) -> None:
        self.rotation_provider = rotation_provider or GravityMagneticRotation()
        self.sectors = DIRECTION_SECTORS

    def compute_azimuth(self, accel: Vector3, mag: Vector3) -> Optional[float]:
        """Azimuth in radians, or None if no rotation matrix can be built."""
        rotation_matrix = self.rotation_provider.get_rotation_matrix(
            accel.as_array(), mag.as_array()
        )
        if rotation_matrix is None:
            log.debug("Rotation matrix unavailable for accel=%s mag=%s", accel, mag)
            return None

        azimuth, _pitch, _roll = self.rotation_provider.get_orientation(rotation_matrix)
        if not math.isfinite(azimuth):
            return None
        return azimuth

    def compute_heading(self, accel: Vector3, mag: Vector3) -> Optional[float]:
        """
        Compass heading for the given readings.

        Args:
            accel: Latest accelerometer reading (m/s²)
            mag: Latest magnetometer reading (μT)

        Returns:
            Heading in degrees, in [0, 360), rounded to two decimals.
            None when the readings are degenerate (free fall, field parallel
            to gravity).
        """
        azimuth = self.compute_azimuth(accel, mag)
        if azimuth is None:
            return None
        return normalize_azimuth(azimuth)

    def classify_direction(self, heading: float) -> str:
        """
        Eight-way compass label for a heading.

        Returns:
            One of N, NE, E, SE, S, SW, W, NW; empty string when the heading
            is not a finite value in [0, 360].
        """
        if not math.isfinite(heading):
            return ""

        for sector in self.sectors:
            if sector.lower <= heading <= sector.upper:
                return sector.label
        return ""

    def compute(self, accel: Vector3, mag: Vector3) -> Optional[Tuple[float, str]]:
        """(heading, direction) pair, or None when no heading is available."""
        heading = self.compute_heading(accel, mag)
        if heading is None:
            return None
        return heading, self.classify_direction(heading)
