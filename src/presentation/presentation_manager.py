#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Presentation Manager - compass display and service lifecycle

Responsibilities:
- Receive heading broadcasts from the sensor service
- Render "<angle>  <direction>" and the compass arrow (OpenCV)
- Drive the service lifecycle: visible -> foreground, hidden -> background
- Keyboard input for the main loop

The broadcast receiver runs on the sensor thread, so it only stores the
latest value under a lock; update_display() renders on the main thread.
"""

import threading
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from core.broadcast import Intent, LocalBroadcastManager
from core.sensor_service import SensorServiceController
from presentation.compass_panel import CompassPanel
from utils.config import Config
from utils.config_sections import DisplayConfig

import logging
log = logging.getLogger("compas.presentation")


@dataclass
class UIState:
    """Display state"""
    created: bool = False
    visible: bool = False
    window_open: bool = False


class PresentationManager:
    """
    Compass screen: consumes heading broadcasts and toggles the service
    between foreground (visible) and background (notification) modes.
    """

    def __init__(
        self,
        controller: SensorServiceController,
        broadcast_manager: Optional[LocalBroadcastManager] = None,
        display_config: Optional[DisplayConfig] = None,
    ):
        self.controller = controller
        self.broadcast_manager = broadcast_manager or LocalBroadcastManager.get_instance()
        self.display_config = display_config or DisplayConfig()
        self.panel = CompassPanel(self.display_config)
        self.ui_state = UIState()

        self._lock = threading.Lock()
        self._angle: Optional[float] = None
        self._direction: Optional[str] = None
        self.updates_received = 0
        self.current_display_frame: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_create(self) -> None:
        self.broadcast_manager.register_receiver(self.on_receive, Config.ACTION_ON_SENSOR_CHANGED)
        if self.display_config.enabled:
            cv2.namedWindow(self.display_config.window_name, cv2.WINDOW_NORMAL)
            self.ui_state.window_open = True
        self.ui_state.created = True
        log.debug("Presentation created (display=%s)", self.display_config.enabled)

    def on_resume(self) -> None:
        """Screen visible: service runs without a notification."""
        self.ui_state.visible = True
        self.controller.start(background=False)
        log.debug("Resumed: foreground mode")

    def on_pause(self) -> None:
        """Screen hidden: service keeps a heading notification up."""
        self.ui_state.visible = False
        self.controller.start(background=True)
        log.debug("Paused: background mode")

    def toggle_visibility(self) -> None:
        if self.ui_state.visible:
            self.on_pause()
        else:
            self.on_resume()

    def on_destroy(self) -> None:
        self.broadcast_manager.unregister_receiver(self.on_receive)
        if self.ui_state.window_open:
            cv2.destroyWindow(self.display_config.window_name)
            self.ui_state.window_open = False
        self.ui_state.created = False
        log.debug("Presentation destroyed after %d updates", self.updates_received)

    # ------------------------------------------------------------------
    # Broadcast receiver
    # ------------------------------------------------------------------

    def on_receive(self, intent: Intent) -> None:
        direction = intent.get_string_extra(Config.KEY_DIRECTION)
        angle = intent.get_float_extra(Config.KEY_ANGLE, 0.0)
        with self._lock:
            self._angle = angle
            self._direction = direction
            self.updates_received += 1

    def latest(self) -> Tuple[Optional[float], Optional[str]]:
        with self._lock:
            return self._angle, self._direction

    def get_display_text(self) -> str:
        angle, direction = self.latest()
        return CompassPanel.format_text(angle, direction)

    def get_arrow_rotation(self) -> float:
        angle, _ = self.latest()
        return CompassPanel.arrow_rotation(angle)

    # ------------------------------------------------------------------
    # Rendering (main thread)
    # ------------------------------------------------------------------

    def update_display(self) -> Optional[str]:
        """
        Render the latest heading and poll the keyboard.

        Returns:
            The pressed key as a lowercase character, or None.
        """
        angle, direction = self.latest()
        self.current_display_frame = self.panel.render(angle, direction)

        if not self.ui_state.window_open:
            return None

        if self.ui_state.visible:
            cv2.imshow(self.display_config.window_name, self.current_display_frame)
        else:
            cv2.imshow(self.display_config.window_name, self.panel.render_paused())

        key = cv2.waitKey(self.display_config.refresh_ms) & 0xFF
        if key == 255:
            return None
        return chr(key).lower()
