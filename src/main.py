#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Compass heading service - entry point

Architecture:
- MockSensorSource: feeds accelerometer + magnetometer samples
- SensorService: heading computation, broadcasts, background notification
- PresentationManager: OpenCV compass display, drives foreground/background

Keys (display mode):
- q: quit
- b: hide/show the compass (background/foreground mode)
- s: press the notification stop action (background mode)
"""

import argparse
import time
from pathlib import Path
from typing import List, Optional

from core.broadcast import LocalBroadcastManager
from core.ctrl_handler import CtrlCHandler
from core.hardware.sensor_manager import SensorManager
from core.mock_sensor_source import MOCK_MODES, MockSensorSource
from core.notifications import Notification, NotificationManager
from core.sensor_service import SensorServiceController
from core.telemetry.compass_logger import get_compass_logger
from presentation.presentation_manager import PresentationManager
from utils.config import Config
from utils.config_sections import DisplayConfig, MockSourceConfig


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Compass heading from accelerometer + magnetometer")
    ap.add_argument("--mode", choices=MOCK_MODES, default=Config.MOCK_MODE,
                    help="Sensor source mode")
    ap.add_argument("--replay", type=Path, default=None,
                    help="CSV file for replay mode (timestamp_ns,sensor,x,y,z)")
    ap.add_argument("--no-loop", action="store_true", help="Stop when the replay ends")
    ap.add_argument("--rate", type=float, default=Config.MOCK_RATE_HZ, help="Samples per second")
    ap.add_argument("--rotation", type=float, default=Config.MOCK_ROTATION_DEG_PER_S,
                    help="Synthetic rotation speed (deg/s)")
    ap.add_argument("--heading", type=float, default=0.0,
                    help="Start heading for synthetic/static modes (deg)")
    ap.add_argument("--seed", type=int, default=None, help="Noise seed for static mode")
    ap.add_argument("--headless", action="store_true", help="No OpenCV window")
    ap.add_argument("--background", action="store_true",
                    help="Start hidden, with the heading notification")
    ap.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    ap.add_argument("--log-dir", type=Path, default=None, help="Session log directory")
    return ap


def print_notification(notification: Notification) -> None:
    print(f"[NOTIFICATION] {notification.title}: {notification.body}")


def send_stop_action(notification_manager: NotificationManager,
                     broadcast_manager: LocalBroadcastManager) -> bool:
    """Send the stop intent of the posted notification, as tapping its action would."""
    notification = notification_manager.get(Config.NOTIFICATION_ID)
    if notification is None or notification.stop_action is None:
        print("[MAIN] No notification posted, nothing to stop")
        return False
    return broadcast_manager.send_broadcast(notification.stop_action.intent)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    print("=" * 60)
    print(f"🧭 {Config.APP_NAME} - compass heading service")
    print("=" * 60)

    compass_logger = get_compass_logger(session_dir=args.log_dir)
    print(f"[MAIN] Logs: {compass_logger.log_dir}")

    source_config = MockSourceConfig(
        mode=args.mode,
        rate_hz=args.rate,
        rotation_deg_per_s=args.rotation,
        start_heading_deg=args.heading,
        seed=args.seed,
        replay_path=args.replay,
        loop=not args.no_loop,
    )
    display_config = DisplayConfig(enabled=not args.headless)

    ctrl_handler = CtrlCHandler()
    source = None
    controller = None
    presentation = None

    try:
        sensor_manager = SensorManager()
        source = MockSensorSource(sensor_manager, source_config)

        notification_manager = NotificationManager()
        notification_manager.add_sink(print_notification)

        broadcast_manager = LocalBroadcastManager.get_instance()
        controller = SensorServiceController(sensor_manager, notification_manager, broadcast_manager)
        presentation = PresentationManager(controller, broadcast_manager, display_config)

        presentation.on_create()
        if args.background:
            presentation.on_pause()
        else:
            presentation.on_resume()

        source.start()

        started = time.time()
        last_print = 0.0
        while not ctrl_handler.should_stop:
            key = presentation.update_display()
            if key == "q":
                break
            if key == "b":
                presentation.toggle_visibility()
            if key == "s":
                send_stop_action(notification_manager, broadcast_manager)

            if args.headless:
                time.sleep(display_config.refresh_ms / 1000.0)
                if presentation.ui_state.visible and time.time() - last_print >= 1.0:
                    text = presentation.get_display_text()
                    if text:
                        print(f"[COMPASS] {text}")
                    last_print = time.time()

            if not controller.is_running:
                print("[MAIN] Service stopped from notification")
                break

            if args.duration is not None and time.time() - started >= args.duration:
                break
            if not source.running:
                print("[MAIN] Sensor source finished")
                break

    except ValueError as e:
        print(f"[ERROR] {e}")
        return 2
    finally:
        print("\n[MAIN] Shutting down...")
        if source is not None:
            source.stop()
        if presentation is not None:
            presentation.on_destroy()
        if controller is not None:
            controller.stop()
        ctrl_handler.restore()
        compass_logger.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
