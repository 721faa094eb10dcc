"""Core utilities for configuration, logging, and domain models."""

from .config import (
    AdjusterSettings,
    AppSettings,
    SchedulingSettings,
    TrackerSettings,
    load_app_settings,
)
from .logging import configure_logging

__all__ = [
    "AdjusterSettings",
    "AppSettings",
    "SchedulingSettings",
    "TrackerSettings",
    "configure_logging",
    "load_app_settings",
]
