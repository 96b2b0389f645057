"""
Centralized configuration for the compass heading service.

This module provides all configuration constants and runtime settings for:
- Sensor registration (sampling period, report latency)
- Heading computation (gravity reference, degenerate-input thresholds)
- Broadcast actions and intent extra keys
- Background notification (ids, channel, texts)
- Compass display (window, panel size)
- Mock sensor sources (synthetic, replay, static)

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from utils.config import Config

    action = Config.ACTION_ON_SENSOR_CHANGED
    if Config.DISPLAY_ENABLED:
        # Open the OpenCV compass window
"""

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class Config:
    """System configuration constants for the compass heading service."""

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    APP_NAME = "Compas"
    PACKAGE_NAME = "ru.headgrass.compas"

    # ==========================================================================
    # SENSORS: Sampling rates (microseconds)
    # ==========================================================================

    SENSOR_DELAY_NORMAL_US = 200_000    # ~5 Hz
    SENSOR_DELAY_UI_US = 60_000         # ~16 Hz
    SENSOR_SAMPLING_PERIOD_US = SENSOR_DELAY_NORMAL_US
    SENSOR_MAX_REPORT_LATENCY_US = SENSOR_DELAY_UI_US

    NUM_OF_AXES = 3
    ROT_MATRIX_SIZE = 9

    # ==========================================================================
    # HEADING: Rotation matrix thresholds
    # ==========================================================================

    STANDARD_GRAVITY = 9.80665                                  # m/s²
    FREE_FALL_GRAVITY_SQUARED = 0.01 * STANDARD_GRAVITY ** 2    # |a|² below = free fall
    MIN_HORIZONTAL_FIELD_NORM = 0.1                             # |E x A| below = degenerate
    HEADING_DECIMALS = 2

    # ==========================================================================
    # BROADCAST: Actions and intent extras
    # ==========================================================================

    ACTION_ON_SENSOR_CHANGED = f"{PACKAGE_NAME}.ON_SENSOR_CHANGED"
    ACTION_NOTIFICATION_STOP = f"{PACKAGE_NAME}.NOTIFICATION_STOP"

    KEY_ANGLE = "angle"
    KEY_DIRECTION = "direction"
    KEY_BACKGROUND = "background"
    KEY_NOTIFICATION_ID = "notificationId"

    # ==========================================================================
    # NOTIFICATIONS
    # ==========================================================================

    NOTIFICATION_ID = 1
    NOTIFICATION_CHANNEL_ID = PACKAGE_NAME
    NOTIFICATION_CHANNEL_NAME = "Notifications"
    NOTIFICATION_TITLE = APP_NAME
    NOTIFICATION_BODY_TEMPLATE = "You are facing {direction} at an angle of {angle}"
    NOTIFICATION_STOP_LABEL = "Stop notifications"
    NOT_AVAILABLE_LABEL = "N/A"

    # ==========================================================================
    # DISPLAY: OpenCV compass window
    # ==========================================================================

    DISPLAY_ENABLED = True
    DISPLAY_WINDOW_NAME = "Compas"
    DISPLAY_PANEL_SIZE = 360
    DISPLAY_REFRESH_MS = 30

    # ==========================================================================
    # MOCK SENSOR SOURCE
    # ==========================================================================

    MOCK_MODE = "synthetic"            # 'synthetic', 'replay', 'static'
    MOCK_RATE_HZ = 20.0
    MOCK_ROTATION_DEG_PER_S = 15.0
    MOCK_FIELD_HORIZONTAL_UT = 22.0    # Horizontal geomagnetic component (μT)
    MOCK_FIELD_VERTICAL_UT = -40.0     # Vertical component, pointing down (μT)
    MOCK_NOISE_STD = 0.05

    # ==========================================================================
    # LOGGING
    # ==========================================================================

    LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
    LOG_LEVEL = "INFO"
