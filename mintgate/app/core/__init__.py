"""Core utilities for the mint throttle."""

from mintgate.app.core.clock import Clock, SystemClock, get_clock
from mintgate.app.core.config import Settings, settings
from mintgate.app.core.logging import get_logger, setup_logging

__all__ = [
    "Clock",
    "SystemClock",
    "get_clock",
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
]
