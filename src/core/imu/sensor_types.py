"""Sensor data types shared by the sensor sources, the service and the heading math."""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np


class SensorType(Enum):
    ACCELEROMETER = "accelerometer"
    MAGNETIC_FIELD = "magnetic_field"


@dataclass(frozen=True)
class Sensor:
    """Handle for a physical or simulated sensor"""
    sensor_type: SensorType
    name: str = ""


@dataclass
class Vector3:
    """Raw 3-axis sample (m/s² for accelerometer, μT for magnetometer)"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "Vector3":
        x, y, z = values[:3]
        return cls(float(x), float(y), float(z))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass
class SensorEvent:
    """One sample delivered by a sensor"""
    sensor: Sensor
    values: Sequence[float]
    timestamp_ns: int = 0
