"""
In-process broadcast bus between the sensor service and its consumers.

Receivers subscribe to an action string; senders publish an Intent carrying
that action plus a dictionary of extras. Delivery is synchronous on the
sender's thread.

Features:
- Singleton bus (one instance per process) via get_instance()
- Action-keyed receiver registration
- A failing receiver is logged and does not block the others

Usage:
    bus = LocalBroadcastManager.get_instance()
    bus.register_receiver(on_heading, Config.ACTION_ON_SENSOR_CHANGED)
    bus.send_broadcast(Intent(Config.ACTION_ON_SENSOR_CHANGED, {"angle": 12.5}))
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import logging
log = logging.getLogger("compas.service")

BroadcastReceiver = Callable[["Intent"], None]


@dataclass
class Intent:
    """Action plus extras, the unit carried by the broadcast bus."""
    action: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def put_extra(self, key: str, value: Any) -> "Intent":
        self.extras[key] = value
        return self

    def get_extra(self, key: str, default: Any = None) -> Any:
        return self.extras.get(key, default)

    def get_bool_extra(self, key: str, default: bool = False) -> bool:
        value = self.extras.get(key, default)
        return value if isinstance(value, bool) else default

    def get_float_extra(self, key: str, default: float = 0.0) -> float:
        value = self.extras.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def get_int_extra(self, key: str, default: int = -1) -> int:
        value = self.extras.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int):
            return default
        return value

    def get_string_extra(self, key: str) -> Optional[str]:
        value = self.extras.get(key)
        return value if isinstance(value, str) else None


class LocalBroadcastManager:
    """Singleton action-keyed publish/subscribe bus."""

    _instance = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._receivers: List[Tuple[BroadcastReceiver, str]] = []
        self._lock = threading.Lock()
        self.broadcasts_sent = 0

    @classmethod
    def get_instance(cls) -> "LocalBroadcastManager":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide bus (tests and clean shutdown)."""
        with cls._instance_lock:
            cls._instance = None

    def register_receiver(self, receiver: BroadcastReceiver, action: str) -> None:
        with self._lock:
            if (receiver, action) not in self._receivers:
                self._receivers.append((receiver, action))

    def unregister_receiver(self, receiver: BroadcastReceiver) -> None:
        with self._lock:
            self._receivers = [(r, a) for r, a in self._receivers if r != receiver]

    def receiver_count(self, action: Optional[str] = None) -> int:
        with self._lock:
            if action is None:
                return len(self._receivers)
            return sum(1 for _, a in self._receivers if a == action)

    def send_broadcast(self, intent: Intent) -> bool:
        """
        Deliver an intent to every receiver registered for its action.

        Returns:
            True if at least one receiver matched.
        """
        with self._lock:
            targets = [r for r, a in self._receivers if a == intent.action]

        for receiver in targets:
            try:
                receiver(intent)
            except Exception:
                log.exception("Broadcast receiver failed for action %s", intent.action)

        self.broadcasts_sent += 1
        return bool(targets)
