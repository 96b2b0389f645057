"""
Persistent heading notification for background mode.

While the compass display is not visible the sensor service keeps a single
notification up to date with the latest direction and angle. The notification
carries a stop action; triggering it stops the service and removes the
notification.

Components:
- NotificationFormatter: builds Notification objects from (direction, angle)
- NotificationManager: posts, replaces and cancels notifications by id
- NotificationActionListener: handles the stop action intent

Usage:
    manager = NotificationManager()
    formatter = NotificationFormatter()
    manager.notify(formatter.build_notification("NE", 42.5))
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from core.broadcast import Intent
from utils.config import Config

import logging
log = logging.getLogger("compas.service")


@dataclass
class NotificationChannel:
    """Silent, badge-less channel the heading notification is posted on."""
    channel_id: str
    name: str
    enable_lights: bool = False
    enable_vibration: bool = False
    sound: Optional[str] = None
    show_badge: bool = False


@dataclass
class NotificationAction:
    label: str
    intent: Intent


@dataclass
class Notification:
    """Notification fields: title, body and a stop action."""
    notification_id: int
    title: str
    body: str
    channel_id: str = Config.NOTIFICATION_CHANNEL_ID
    actions: List[NotificationAction] = field(default_factory=list)
    auto_cancel: bool = True
    when: float = field(default_factory=time.time)

    @property
    def stop_action(self) -> Optional[NotificationAction]:
        for action in self.actions:
            if action.intent.action == Config.ACTION_NOTIFICATION_STOP:
                return action
        return None


class NotificationFormatter:
    """Builds the heading notification shown in background mode."""

    def __init__(
        self,
        title: str = Config.NOTIFICATION_TITLE,
        body_template: str = Config.NOTIFICATION_BODY_TEMPLATE,
        notification_id: int = Config.NOTIFICATION_ID,
    ) -> None:
        self.title = title
        self.body_template = body_template
        self.notification_id = notification_id

    def format_body(self, direction: str, angle: float) -> str:
        """
        Examples:
            >>> formatter.format_body("NE", 42.5)
            "You are facing NE at an angle of 42.5"
        """
        return self.body_template.format(direction=direction, angle=angle)

    def build_stop_intent(self) -> Intent:
        return Intent(
            Config.ACTION_NOTIFICATION_STOP,
            {Config.KEY_NOTIFICATION_ID: self.notification_id},
        )

    def build_notification(self, direction: str, angle: float) -> Notification:
        return Notification(
            notification_id=self.notification_id,
            title=self.title,
            body=self.format_body(direction, angle),
            actions=[NotificationAction(Config.NOTIFICATION_STOP_LABEL, self.build_stop_intent())],
        )


NotificationSink = Callable[[Notification], None]


class NotificationManager:
    """Tracks active notifications by id and forwards posts to optional sinks."""

    def __init__(self) -> None:
        self._active: Dict[int, Notification] = {}
        self._channels: Dict[str, NotificationChannel] = {}
        self._sinks: List[NotificationSink] = []
        self._lock = threading.Lock()
        self.posted_count = 0

    def create_notification_channel(self, channel: NotificationChannel) -> None:
        with self._lock:
            self._channels[channel.channel_id] = channel

    def get_channel(self, channel_id: str) -> Optional[NotificationChannel]:
        with self._lock:
            return self._channels.get(channel_id)

    def add_sink(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    def notify(self, notification: Notification) -> None:
        """Post or replace the notification with the same id."""
        with self._lock:
            self._active[notification.notification_id] = notification
            self.posted_count += 1

        for sink in self._sinks:
            try:
                sink(notification)
            except Exception:
                log.exception("Notification sink failed")

    def cancel(self, notification_id: int) -> bool:
        with self._lock:
            removed = self._active.pop(notification_id, None)
        if removed is not None:
            log.debug("Notification %d cancelled", notification_id)
        return removed is not None

    def get(self, notification_id: int) -> Optional[Notification]:
        with self._lock:
            return self._active.get(notification_id)

    @property
    def active(self) -> List[Notification]:
        with self._lock:
            return list(self._active.values())


class NotificationActionListener:
    """Receiver for the notification stop action."""

    def __init__(self, notification_manager: NotificationManager,
                 stop_service: Callable[[], None]) -> None:
        self.notification_manager = notification_manager
        self.stop_service = stop_service

    def on_receive(self, intent: Optional[Intent]) -> None:
        if intent is None or intent.action is None:
            return
        if intent.action != Config.ACTION_NOTIFICATION_STOP:
            return

        self.stop_service()

        notification_id = intent.get_int_extra(Config.KEY_NOTIFICATION_ID, -1)
        if notification_id != -1:
            self.notification_manager.cancel(notification_id)
