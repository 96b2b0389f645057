"""Tests for SensorService buffering, broadcasting and notification handling."""

from __future__ import annotations

import pytest

from core.broadcast import Intent, LocalBroadcastManager
from core.hardware.sensor_manager import SensorManager
from core.imu.sensor_types import Sensor, SensorEvent, SensorType
from core.mock_sensor_source import flat_device_sample
from core.notifications import NotificationFormatter, NotificationManager
from core.sensor_service import SensorService, SensorServiceController
from utils.config import Config

ACCEL = Sensor(SensorType.ACCELEROMETER, "accel")
MAG = Sensor(SensorType.MAGNETIC_FIELD, "mag")


@pytest.fixture()
def service_env():
    sensor_manager = SensorManager()
    sensor_manager.add_sensor(ACCEL)
    sensor_manager.add_sensor(MAG)
    notifications = NotificationManager()
    bus = LocalBroadcastManager()
    received: list[Intent] = []
    bus.register_receiver(received.append, Config.ACTION_ON_SENSOR_CHANGED)

    service = SensorService(sensor_manager, notifications, broadcast_manager=bus)
    service.on_create()
    return service, sensor_manager, notifications, bus, received


def send_heading(sensor_manager: SensorManager, heading: float) -> None:
    accel, mag = flat_device_sample(heading)
    sensor_manager.dispatch(SensorEvent(ACCEL, list(accel)))
    sensor_manager.dispatch(SensorEvent(MAG, list(mag)))


def test_on_create_posts_initial_notification(service_env):
    service, _, notifications, _, _ = service_env

    notification = notifications.get(Config.NOTIFICATION_ID)
    assert notification is not None
    assert notification.body == "You are facing N/A at an angle of 0.0"
    assert service.in_foreground


def test_no_heading_until_both_sensors_reported(service_env):
    service, sensor_manager, _, _, received = service_env

    accel, _ = flat_device_sample(0.0)
    sensor_manager.dispatch(SensorEvent(ACCEL, list(accel)))

    assert received == []
    assert service.angle is None


def test_heading_broadcast_in_foreground_removes_notification(service_env):
    service, sensor_manager, notifications, _, received = service_env

    send_heading(sensor_manager, 90.0)

    assert len(received) == 1
    assert received[0].get_float_extra(Config.KEY_ANGLE) == 90.0
    assert received[0].get_string_extra(Config.KEY_DIRECTION) == "E"
    assert notifications.active == []
    assert not service.in_foreground


def test_background_mode_updates_notification(service_env):
    service, sensor_manager, notifications, _, received = service_env
    service.on_start_command(Intent().put_extra(Config.KEY_BACKGROUND, True))

    send_heading(sensor_manager, 200.0)

    notification = notifications.get(Config.NOTIFICATION_ID)
    assert notification.body == "You are facing SW at an angle of 200.0"
    assert notification.stop_action is not None
    assert len(received) == 1


def test_start_command_without_intent_keeps_flag(service_env):
    service, _, _, _, _ = service_env
    service.on_start_command(Intent().put_extra(Config.KEY_BACKGROUND, True))
    service.on_start_command(None)
    assert service.background is True


def test_reading_buffers_overwritten_in_place(service_env):
    service, sensor_manager, _, _, _ = service_env
    buffer = service.accelerometer_reading

    sensor_manager.dispatch(SensorEvent(ACCEL, [1.0, 2.0, 9.0, 123.0]))

    assert service.accelerometer_reading is buffer
    assert buffer.tolist() == [1.0, 2.0, 9.0]


@pytest.mark.parametrize("values", [None, [1.0, 2.0], ["a", "b", "c"], [float("nan"), 0.0, 9.81]])
def test_malformed_events_are_dropped(service_env, values):
    service, sensor_manager, _, _, received = service_env

    sensor_manager.dispatch(SensorEvent(ACCEL, values))

    assert service.dropped_events == 1
    assert received == []
    assert service.accelerometer_reading.tolist() == [0.0, 0.0, 0.0]


def test_null_event_is_dropped(service_env):
    service, _, _, _, _ = service_env
    service.on_sensor_changed(None)
    assert service.dropped_events == 1


def test_degenerate_readings_emit_nothing(service_env):
    service, sensor_manager, _, _, received = service_env

    sensor_manager.dispatch(SensorEvent(ACCEL, [0.0, 0.0, 9.81]))
    sensor_manager.dispatch(SensorEvent(MAG, [0.0, 0.0, -40.0]))

    assert received == []
    assert service.updates_count == 0


def test_missing_magnetometer_is_tolerated():
    sensor_manager = SensorManager()
    sensor_manager.add_sensor(ACCEL)
    bus = LocalBroadcastManager()
    received: list[Intent] = []
    bus.register_receiver(received.append, Config.ACTION_ON_SENSOR_CHANGED)

    service = SensorService(sensor_manager, NotificationManager(), broadcast_manager=bus)
    service.on_create()
    sensor_manager.dispatch(SensorEvent(ACCEL, [0.0, 0.0, 9.81]))

    assert service.created
    assert received == []


def test_stop_action_broadcast_stops_service(service_env):
    service, sensor_manager, notifications, bus, received = service_env
    service.on_start_command(Intent().put_extra(Config.KEY_BACKGROUND, True))
    send_heading(sensor_manager, 10.0)

    bus.send_broadcast(NotificationFormatter().build_stop_intent())

    assert not service.created
    assert notifications.active == []
    assert sensor_manager.listeners_for(ACCEL) == []

    send_heading(sensor_manager, 20.0)
    assert len(received) == 1


def test_controller_toggles_background_and_restarts():
    sensor_manager = SensorManager()
    sensor_manager.add_sensor(ACCEL)
    sensor_manager.add_sensor(MAG)
    notifications = NotificationManager()
    controller = SensorServiceController(sensor_manager, notifications, LocalBroadcastManager())

    first = controller.start(background=False)
    assert controller.is_running
    assert first.background is False

    assert controller.start(background=True) is first
    assert first.background is True

    controller.stop()
    assert not controller.is_running

    second = controller.start(background=False)
    assert second is not first
    assert controller.is_running


def test_event_in_flight_after_stop_is_ignored(service_env):
    service, sensor_manager, notifications, bus, received = service_env
    service.on_start_command(Intent().put_extra(Config.KEY_BACKGROUND, True))
    accel, mag = flat_device_sample(45.0)
    sensor_manager.dispatch(SensorEvent(ACCEL, list(accel)))
    pending = sensor_manager.listeners_for(MAG)

    bus.send_broadcast(NotificationFormatter().build_stop_intent())
    assert notifications.active == []

    for listener in pending:
        listener.on_sensor_changed(SensorEvent(MAG, list(mag)))

    assert not service.created
    assert notifications.active == []
    assert received == []
    assert service.updates_count == 0
