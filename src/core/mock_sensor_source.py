#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mock sensor source for running the compass without sensor hardware.

This module provides a drop-in sensor source that registers a simulated
accelerometer and magnetometer with the SensorManager and feeds them from a
background thread:
1. Synthetic samples of a flat device turning at a constant rate
2. Replay of recorded samples from a CSV file, optionally in loop
3. A static pose with small random variations (noise)

Operating modes:
- 'synthetic': Flat device rotating at MockSourceConfig.rotation_deg_per_s
- 'replay': Rows of `timestamp_ns,sensor,x,y,z` (sensor = accelerometer|magnetic_field)
- 'static': Fixed heading (start_heading_deg) plus Gaussian noise

Usage:
    # Synthetic mode (default)
    source = MockSensorSource(sensor_manager)
    source.start()

    # Replay mode
    cfg = MockSourceConfig(mode='replay', replay_path=Path('data/walk.csv'))
    source = MockSensorSource(sensor_manager, cfg)
"""

import csv
import math
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from core.hardware.sensor_manager import SensorManager
from core.imu.sensor_types import Sensor, SensorEvent, SensorType
from utils.config import Config
from utils.config_sections import MockSourceConfig

import logging
log = logging.getLogger("compas.sensor")

MOCK_MODES = ("synthetic", "replay", "static")


def flat_device_sample(
    heading_deg: float,
    field_horizontal_ut: float = Config.MOCK_FIELD_HORIZONTAL_UT,
    field_vertical_ut: float = Config.MOCK_FIELD_VERTICAL_UT,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Accelerometer and magnetometer readings of a device lying flat, screen up,
    with its top edge pointing at heading_deg (clockwise from magnetic north).
    """
    theta = math.radians(heading_deg)
    accel = np.array([0.0, 0.0, Config.STANDARD_GRAVITY])
    mag = np.array([
        -field_horizontal_ut * math.sin(theta),
        field_horizontal_ut * math.cos(theta),
        field_vertical_ut,
    ])
    return accel, mag


class MockSensorSource:
    """
    Simulated accelerometer + magnetometer pair.

    See module docstring for usage examples.
    """

    def __init__(
        self,
        sensor_manager: SensorManager,
        config: Optional[MockSourceConfig] = None,
    ) -> None:
        self.sensor_manager = sensor_manager
        self.config = config or MockSourceConfig()
        self.mode = self.config.mode

        self.accelerometer = Sensor(SensorType.ACCELEROMETER, "mock-accelerometer")
        self.magnetometer = Sensor(SensorType.MAGNETIC_FIELD, "mock-magnetometer")

        self.running = False
        self.step = 0
        self.samples_emitted = 0
        self._thread: Optional[threading.Thread] = None
        self._rng = np.random.default_rng(self.config.seed)
        self._replay_rows: List[Tuple[int, SensorType, Tuple[float, float, float]]] = []
        self._replay_index = 0

        self._init_mode()

        self.sensor_manager.add_sensor(self.accelerometer)
        self.sensor_manager.add_sensor(self.magnetometer)

        print(f"[MockSensorSource] Initialized in '{self.mode}' mode @ {self.config.rate_hz} Hz")

    def _init_mode(self) -> None:
        """Validate the mode and load replay data."""
        if self.mode not in MOCK_MODES:
            raise ValueError(f"Unknown mode: {self.mode}")
        if self.config.rate_hz <= 0:
            raise ValueError(f"rate_hz must be positive, got {self.config.rate_hz}")

        if self.mode == "replay":
            path = self.config.replay_path
            if not path or not Path(path).exists():
                raise ValueError(f"Replay file not found: {path}")
            self._replay_rows = self._load_replay(Path(path))
            if not self._replay_rows:
                raise ValueError(f"Replay file has no samples: {path}")
            log.info("Loaded %d replay samples from %s", len(self._replay_rows), path)

    @staticmethod
    def _load_replay(path: Path) -> List[Tuple[int, SensorType, Tuple[float, float, float]]]:
        rows = []
        with open(path, newline="") as f:
            for line_no, row in enumerate(csv.reader(f), start=1):
                if not row or row[0].strip().startswith("#"):
                    continue
                if row[0].strip() == "timestamp_ns":
                    continue
                try:
                    timestamp_ns = int(row[0])
                    sensor_type = SensorType(row[1].strip())
                    values = (float(row[2]), float(row[3]), float(row[4]))
                except (IndexError, ValueError) as e:
                    log.warning("Skipping replay line %d: %s", line_no, e)
                    continue
                rows.append((timestamp_ns, sensor_type, values))
        return rows

    def start(self) -> None:
        """Start sample generation on a daemon thread."""
        if self.running:
            print("[MockSensorSource] Already running")
            return

        self.running = True
        self._thread = threading.Thread(target=self._generate_samples, daemon=True)
        self._thread.start()
        print("[MockSensorSource] Started sample generation")

    def stop(self) -> None:
        """Stop sample generation."""
        self.running = False
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None
        print(f"[MockSensorSource] Stopped after {self.samples_emitted} samples")

    def _generate_samples(self) -> None:
        period = 1.0 / self.config.rate_hz
        while self.running:
            started = time.time()
            try:
                if not self.emit_once():
                    self.running = False
                    break
            except Exception:
                log.exception("Mock sample dispatch failed")
            elapsed = time.time() - started
            time.sleep(max(0.0, period - elapsed))

    def current_heading(self) -> float:
        """Heading (degrees) simulated for the current step."""
        if self.mode == "synthetic":
            elapsed = self.step / self.config.rate_hz
            return (self.config.start_heading_deg
                    + self.config.rotation_deg_per_s * elapsed) % 360.0
        return self.config.start_heading_deg % 360.0

    def emit_once(self) -> bool:
        """
        Emit one step of samples.

        Returns:
            False when a non-looping replay is exhausted, True otherwise.
        """
        timestamp_ns = time.time_ns()

        if self.mode == "replay":
            return self._emit_replay()

        accel, mag = flat_device_sample(
            self.current_heading(),
            self.config.field_horizontal_ut,
            self.config.field_vertical_ut,
        )
        if self.mode == "static" and self.config.noise_std > 0:
            accel = accel + self._rng.normal(0.0, self.config.noise_std, 3)
            mag = mag + self._rng.normal(0.0, self.config.noise_std, 3)

        self._dispatch(self.accelerometer, accel, timestamp_ns)
        self._dispatch(self.magnetometer, mag, timestamp_ns)
        self.step += 1
        return True

    def _emit_replay(self) -> bool:
        if self._replay_index >= len(self._replay_rows):
            if not self.config.loop:
                return False
            self._replay_index = 0

        timestamp_ns, sensor_type, values = self._replay_rows[self._replay_index]
        self._replay_index += 1
        sensor = self.accelerometer if sensor_type is SensorType.ACCELEROMETER else self.magnetometer
        self._dispatch(sensor, values, timestamp_ns)
        self.step += 1
        return True

    def _dispatch(self, sensor: Sensor, values, timestamp_ns: int) -> None:
        event = SensorEvent(sensor=sensor, values=[float(v) for v in values],
                            timestamp_ns=timestamp_ns)
        self.sensor_manager.dispatch(event)
        self.samples_emitted += 1
