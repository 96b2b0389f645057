"""
Sensor registry and event dispatch.

This module is the host side of sensor delivery:
- Sensor registration by the sources that own them (mock or hardware)
- Default sensor lookup by type
- Listener registration with sampling period / report latency
- Serialized dispatch: listeners see one event at a time

Usage:
    sensor_manager = SensorManager()
    accelerometer = sensor_manager.get_default_sensor(SensorType.ACCELEROMETER)
    if accelerometer is not None:
        sensor_manager.register_listener(service, accelerometer)
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from core.imu.sensor_types import Sensor, SensorEvent, SensorType
from utils.config import Config

import logging
log = logging.getLogger("compas.sensor")


class SensorEventListener(Protocol):
    def on_sensor_changed(self, event: Optional[SensorEvent]) -> None:
        ...

    def on_accuracy_changed(self, sensor: Optional[Sensor], accuracy: int) -> None:
        ...


@dataclass
class _Registration:
    listener: SensorEventListener
    sensor: Sensor
    sampling_period_us: int
    max_report_latency_us: int


class SensorManager:
    """Keeps track of available sensors and who listens to them."""

    def __init__(self) -> None:
        self._sensors: Dict[SensorType, List[Sensor]] = {}
        self._registrations: List[_Registration] = []
        self._lock = threading.Lock()
        self._dispatch_lock = threading.RLock()
        self.events_dispatched = 0

    def add_sensor(self, sensor: Sensor) -> None:
        """Make a sensor available. The first sensor of each type is the default."""
        with self._lock:
            self._sensors.setdefault(sensor.sensor_type, []).append(sensor)
        log.debug("Sensor added: %s (%s)", sensor.name, sensor.sensor_type.value)

    def get_sensor_list(self, sensor_type: SensorType) -> List[Sensor]:
        with self._lock:
            return list(self._sensors.get(sensor_type, []))

    def get_default_sensor(self, sensor_type: SensorType) -> Optional[Sensor]:
        sensors = self.get_sensor_list(sensor_type)
        return sensors[0] if sensors else None

    def register_listener(
        self,
        listener: SensorEventListener,
        sensor: Optional[Sensor],
        sampling_period_us: int = Config.SENSOR_SAMPLING_PERIOD_US,
        max_report_latency_us: int = Config.SENSOR_MAX_REPORT_LATENCY_US,
    ) -> bool:
        """
        Subscribe a listener to a sensor.

        Returns:
            False when the sensor is None or unknown, True otherwise.
        """
        if sensor is None:
            return False

        with self._lock:
            if sensor not in self._sensors.get(sensor.sensor_type, []):
                log.warning("Cannot register listener: unknown sensor %s", sensor)
                return False
            for registration in self._registrations:
                if registration.listener is listener and registration.sensor == sensor:
                    return True
            self._registrations.append(
                _Registration(listener, sensor, sampling_period_us, max_report_latency_us)
            )
        log.debug("Listener %s registered for %s", type(listener).__name__, sensor.name)
        return True

    def unregister_listener(self, listener: SensorEventListener) -> None:
        """
        Remove every registration held by the listener.

        Waits for an in-flight dispatch, so no event reaches the listener after
        this returns.
        """
        with self._dispatch_lock, self._lock:
            self._registrations = [
                r for r in self._registrations if r.listener is not listener
            ]

    def listeners_for(self, sensor: Sensor) -> List[SensorEventListener]:
        with self._lock:
            return [r.listener for r in self._registrations if r.sensor == sensor]

    def dispatch(self, event: SensorEvent) -> int:
        """
        Deliver one event to the listeners of its sensor.

        Returns:
            Number of listeners that received the event.
        """
        with self._dispatch_lock:
            listeners = self.listeners_for(event.sensor)
            for listener in listeners:
                listener.on_sensor_changed(event)
            self.events_dispatched += 1
        return len(listeners)
