"""Tests for the in-process broadcast bus and Intent extras."""

from __future__ import annotations

import pytest

from core.broadcast import Intent, LocalBroadcastManager


@pytest.fixture()
def bus():
    return LocalBroadcastManager()


def test_send_broadcast_matches_action(bus):
    received = []
    bus.register_receiver(received.append, "heading")

    assert bus.send_broadcast(Intent("heading", {"angle": 1.5})) is True
    assert bus.send_broadcast(Intent("other")) is False

    assert len(received) == 1
    assert received[0].get_float_extra("angle") == 1.5


def test_unregister_receiver(bus):
    received = []
    bus.register_receiver(received.append, "heading")
    bus.unregister_receiver(received.append)

    bus.send_broadcast(Intent("heading"))

    assert received == []
    assert bus.receiver_count() == 0


def test_failing_receiver_does_not_block_others(bus):
    received = []

    def broken(intent):
        raise RuntimeError("boom")

    bus.register_receiver(broken, "heading")
    bus.register_receiver(received.append, "heading")

    assert bus.send_broadcast(Intent("heading")) is True
    assert len(received) == 1


def test_get_instance_is_singleton():
    LocalBroadcastManager.reset_instance()
    try:
        assert LocalBroadcastManager.get_instance() is LocalBroadcastManager.get_instance()
    finally:
        LocalBroadcastManager.reset_instance()


def test_intent_extra_defaults():
    intent = Intent("x").put_extra("background", True).put_extra("notificationId", 3)

    assert intent.get_bool_extra("background") is True
    assert intent.get_bool_extra("missing", False) is False
    assert intent.get_int_extra("notificationId") == 3
    assert intent.get_int_extra("background") == -1
    assert intent.get_string_extra("direction") is None
    assert intent.get_float_extra("angle", 0.0) == 0.0
