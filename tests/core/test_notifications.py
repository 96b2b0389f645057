"""Tests for the heading notification builder, manager and stop action."""

from __future__ import annotations

from core.broadcast import Intent
from core.notifications import (
    NotificationActionListener,
    NotificationChannel,
    NotificationFormatter,
    NotificationManager,
)
from utils.config import Config


def test_build_notification_fields():
    notification = NotificationFormatter().build_notification("NE", 42.5)

    assert notification.notification_id == Config.NOTIFICATION_ID
    assert notification.title == Config.NOTIFICATION_TITLE
    assert notification.body == "You are facing NE at an angle of 42.5"
    assert notification.stop_action is not None
    assert notification.stop_action.label == Config.NOTIFICATION_STOP_LABEL
    assert notification.stop_action.intent.get_int_extra(Config.KEY_NOTIFICATION_ID) == Config.NOTIFICATION_ID


def test_custom_body_template():
    formatter = NotificationFormatter(body_template="{direction} / {angle}")
    assert formatter.format_body("S", 180.0) == "S / 180.0"


def test_notify_replaces_by_id_and_feeds_sinks():
    manager = NotificationManager()
    posted = []
    manager.add_sink(posted.append)
    formatter = NotificationFormatter()

    manager.notify(formatter.build_notification("N", 1.0))
    manager.notify(formatter.build_notification("N", 2.0))

    assert len(manager.active) == 1
    assert manager.get(Config.NOTIFICATION_ID).body.endswith("2.0")
    assert len(posted) == 2
    assert manager.posted_count == 2


def test_failing_sink_is_isolated():
    manager = NotificationManager()

    def broken(_):
        raise RuntimeError("sink down")

    manager.add_sink(broken)
    manager.notify(NotificationFormatter().build_notification("W", 270.0))
    assert len(manager.active) == 1


def test_cancel_unknown_id():
    manager = NotificationManager()
    assert manager.cancel(99) is False


def test_channel_registration():
    manager = NotificationManager()
    manager.create_notification_channel(NotificationChannel("compas", "Notifications"))
    channel = manager.get_channel("compas")
    assert channel is not None
    assert channel.enable_vibration is False
    assert channel.sound is None


def test_stop_action_stops_service_and_cancels():
    manager = NotificationManager()
    manager.notify(NotificationFormatter().build_notification("E", 90.0))
    stopped = []
    listener = NotificationActionListener(manager, lambda: stopped.append(True))

    listener.on_receive(NotificationFormatter().build_stop_intent())

    assert stopped == [True]
    assert manager.active == []


def test_stop_action_without_id_keeps_notification():
    manager = NotificationManager()
    manager.notify(NotificationFormatter().build_notification("E", 90.0))
    stopped = []
    listener = NotificationActionListener(manager, lambda: stopped.append(True))

    listener.on_receive(Intent(Config.ACTION_NOTIFICATION_STOP))

    assert stopped == [True]
    assert len(manager.active) == 1


def test_other_actions_are_ignored():
    manager = NotificationManager()
    stopped = []
    listener = NotificationActionListener(manager, lambda: stopped.append(True))

    listener.on_receive(None)
    listener.on_receive(Intent(None))
    listener.on_receive(Intent("something.else"))

    assert stopped == []
