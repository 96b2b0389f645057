#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sensor service: raw samples in, heading broadcasts and notification out.

The service is the single sensor listener of the application. For every
accelerometer or magnetometer event it:
1. Copies the sample into its fixed-size reading buffer (in place)
2. Computes heading + direction from the latest pair of readings
3. Broadcasts ACTION_ON_SENSOR_CHANGED with the angle and direction
4. Shows the heading notification in background mode, removes it otherwise

The "background" flag is driven by start intents from the lifecycle
controller (SensorServiceController): the compass display starts the service
with background=False when it becomes visible and background=True when it is
hidden.

Usage:
    controller = SensorServiceController(sensor_manager, notification_manager)
    controller.start(background=False)   # display visible
    controller.start(background=True)    # display hidden, notification on
    controller.stop()
"""

import math
from typing import Optional

import numpy as np

from core.broadcast import Intent, LocalBroadcastManager
from core.hardware.sensor_manager import SensorManager
from core.imu.heading_calculator import HeadingCalculator
from core.imu.sensor_types import Sensor, SensorEvent, SensorType, Vector3
from core.notifications import (
    Notification,
    NotificationActionListener,
    NotificationChannel,
    NotificationFormatter,
    NotificationManager,
)
from utils.config import Config

import logging
log = logging.getLogger("compas.service")


class SensorService:
    """Heading service fed by accelerometer and magnetometer events."""

    def __init__(
        self,
        sensor_manager: SensorManager,
        notification_manager: NotificationManager,
        broadcast_manager: Optional[LocalBroadcastManager] = None,
        calculator: Optional[HeadingCalculator] = None,
        formatter: Optional[NotificationFormatter] = None,
    ) -> None:
        self.sensor_manager = sensor_manager
        self.notification_manager = notification_manager
        self.broadcast_manager = broadcast_manager or LocalBroadcastManager.get_instance()
        self.calculator = calculator or HeadingCalculator()
        self.formatter = formatter or NotificationFormatter()

        # Reading buffers, overwritten in place on every event
        self.accelerometer_reading = np.zeros(Config.NUM_OF_AXES)
        self.magnetometer_reading = np.zeros(Config.NUM_OF_AXES)
        self._has_accelerometer = False
        self._has_magnetometer = False

        self.background = False
        self.created = False
        self.in_foreground = False
        self.notification_id = self.formatter.notification_id

        # Latest result
        self.angle: Optional[float] = None
        self.direction: Optional[str] = None
        self.updates_count = 0
        self.dropped_events = 0

        self.action_listener = NotificationActionListener(notification_manager, self.stop)

    def on_create(self) -> None:
        """Register for the default sensors and post the initial notification."""
        registered = []
        for sensor_type in (SensorType.ACCELEROMETER, SensorType.MAGNETIC_FIELD):
            sensor = self.sensor_manager.get_default_sensor(sensor_type)
            if sensor is None:
                log.warning("No default %s sensor, heading updates disabled", sensor_type.value)
                continue
            self.sensor_manager.register_listener(
                self,
                sensor,
                Config.SENSOR_SAMPLING_PERIOD_US,
                Config.SENSOR_MAX_REPORT_LATENCY_US,
            )
            registered.append(sensor.name or sensor_type.value)

        self.notification_manager.create_notification_channel(NotificationChannel(
            channel_id=Config.NOTIFICATION_CHANNEL_ID,
            name=Config.NOTIFICATION_CHANNEL_NAME,
        ))

        self.broadcast_manager.register_receiver(
            self.action_listener.on_receive, Config.ACTION_NOTIFICATION_STOP
        )

        self.start_foreground(self.formatter.build_notification(Config.NOT_AVAILABLE_LABEL, 0.0))
        self.created = True
        print(f"[SERVICE] SensorService created, listening to: {', '.join(registered) or 'nothing'}")

    def on_start_command(self, intent: Optional[Intent]) -> None:
        if intent is not None:
            self.background = intent.get_bool_extra(Config.KEY_BACKGROUND, False)
        log.debug("Start command: background=%s", self.background)

    def on_sensor_changed(self, event: Optional[SensorEvent]) -> None:
        if not self.created:
            return
        if event is None or event.sensor is None:
            self.dropped_events += 1
            return

        values = self._valid_values(event.values)
        if values is None:
            log.debug("Dropping malformed %s event: %r", event.sensor.sensor_type, event.values)
            self.dropped_events += 1
            return

        if event.sensor.sensor_type is SensorType.ACCELEROMETER:
            self.accelerometer_reading[:] = values
            self._has_accelerometer = True
        elif event.sensor.sensor_type is SensorType.MAGNETIC_FIELD:
            self.magnetometer_reading[:] = values
            self._has_magnetometer = True
        else:
            return

        self.update_orientation_angles()

    def on_accuracy_changed(self, sensor: Optional[Sensor], accuracy: int) -> None:
        # nothing to do
        pass

    @staticmethod
    def _valid_values(values) -> Optional[np.ndarray]:
        if values is None:
            return None
        try:
            if len(values) < Config.NUM_OF_AXES:
                return None
            array = np.asarray(values[:Config.NUM_OF_AXES], dtype=float)
        except (TypeError, ValueError):
            return None
        if not all(math.isfinite(v) for v in array):
            return None
        return array

    def update_orientation_angles(self) -> bool:
        """
        Recompute the heading from the current buffers and publish it.

        Returns:
            True if a heading was broadcast.
        """
        if not (self._has_accelerometer and self._has_magnetometer):
            return False

        result = self.calculator.compute(
            Vector3.from_values(self.accelerometer_reading),
            Vector3.from_values(self.magnetometer_reading),
        )
        if result is None:
            return False

        angle, direction = result
        self.angle = angle
        self.direction = direction
        self.updates_count += 1

        intent = Intent(Config.ACTION_ON_SENSOR_CHANGED)
        intent.put_extra(Config.KEY_ANGLE, angle)
        intent.put_extra(Config.KEY_DIRECTION, direction)
        self.broadcast_manager.send_broadcast(intent)

        if self.background:
            self.start_foreground(self.formatter.build_notification(direction, angle))
        else:
            self.stop_foreground(remove_notification=True)

        if self.updates_count % 100 == 0:
            log.info("Heading: %.2f° %s (%d updates)", angle, direction, self.updates_count)
        return True

    def start_foreground(self, notification: Notification) -> None:
        self.notification_manager.notify(notification)
        self.in_foreground = True

    def stop_foreground(self, remove_notification: bool = True) -> None:
        if remove_notification:
            self.notification_manager.cancel(self.notification_id)
        self.in_foreground = False

    def on_destroy(self) -> None:
        """Unregister everything and drop the notification."""
        self.sensor_manager.unregister_listener(self)
        self.broadcast_manager.unregister_receiver(self.action_listener.on_receive)
        self.stop_foreground(remove_notification=True)
        self.created = False
        print(f"[SERVICE] SensorService destroyed after {self.updates_count} heading updates")

    def stop(self) -> None:
        if self.created:
            self.on_destroy()


class SensorServiceController:
    """
    Lifecycle controller for the sensor service.

    start() creates the service on first use and forwards a start intent
    carrying the background flag; stop() destroys it.
    """

    def __init__(
        self,
        sensor_manager: SensorManager,
        notification_manager: NotificationManager,
        broadcast_manager: Optional[LocalBroadcastManager] = None,
        calculator: Optional[HeadingCalculator] = None,
    ) -> None:
        self.sensor_manager = sensor_manager
        self.notification_manager = notification_manager
        self.broadcast_manager = broadcast_manager or LocalBroadcastManager.get_instance()
        self.calculator = calculator
        self.service: Optional[SensorService] = None

    @property
    def is_running(self) -> bool:
        return self.service is not None and self.service.created

    def start(self, background: bool) -> SensorService:
        if not self.is_running:
            self.service = SensorService(
                self.sensor_manager,
                self.notification_manager,
                broadcast_manager=self.broadcast_manager,
                calculator=self.calculator,
            )
            self.service.on_create()

        intent = Intent().put_extra(Config.KEY_BACKGROUND, background)
        self.service.on_start_command(intent)
        return self.service

    def stop(self) -> None:
        if self.service is not None:
            self.service.stop()
