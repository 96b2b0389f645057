"""
Dedicated session logger for the compass service.

This module provides a singleton logger that routes the application's
logging channels into separate files for easier analysis.

Features:
- Singleton pattern (one instance per session)
- Separate log files for sensor delivery, the heading service and the display
- DEBUG level logging to files
- WARNING level console output for critical messages

Log Files:
- sensor.log: Sensor registration, mock source and dispatch events
- service.log: Heading computation, broadcasts and notification updates
- presentation.log: Display lifecycle and rendering

Usage:
    from core.telemetry.compass_logger import get_compass_logger

    compass_logger = get_compass_logger(session_dir=Path("logs/session_2025-01-15_10-30-00"))
    compass_logger.service.debug("Heading computed")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from utils.config import Config

# channel attribute -> (logger name, file name)
CHANNELS = {
    "sensor": ("compas.sensor", "sensor.log"),
    "service": ("compas.service", "service.log"),
    "presentation": ("compas.presentation", "presentation.log"),
}


class CompassLogger:
    """Singleton logger for the compass session."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Optional[Path] = None):
        if self._initialized:
            return

        if session_dir is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_dir = Path(Config.LOG_DIR) / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)

        for name, (logger_name, filename) in CHANNELS.items():
            self._setup_logger(name, logger_name, filename)

        self._initialized = True

    def _setup_logger(self, name: str, logger_name: str, filename: str):
        """Setup individual logger with file handler."""
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        logger.handlers.clear()

        fh = logging.FileHandler(self.log_dir / filename, mode='w')
        fh.setLevel(logging.DEBUG)

        ch = logging.StreamHandler()
        ch.setLevel(logging.WARNING)

        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s',
            datefmt='%H:%M:%S'
        )
        fh.setFormatter(formatter)
        ch.setFormatter(formatter)

        logger.addHandler(fh)
        logger.addHandler(ch)

        setattr(self, name, logger)

    def close(self):
        """Close all handlers."""
        for name in CHANNELS:
            logger = getattr(self, name, None)
            if logger:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)
                logger.propagate = True


_compass_logger = None


def get_compass_logger(session_dir: Optional[Path] = None) -> CompassLogger:
    """Get or create compass logger instance."""
    global _compass_logger
    if _compass_logger is None:
        _compass_logger = CompassLogger(session_dir=session_dir)
    return _compass_logger


def reset_compass_logger() -> None:
    """Close handlers and forget the singleton."""
    global _compass_logger
    if _compass_logger is not None:
        _compass_logger.close()
    _compass_logger = None
    CompassLogger._instance = None
    CompassLogger._initialized = False
