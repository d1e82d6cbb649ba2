"""
Configuration Module

Settings (pydantic-settings) and system-wide constants.
"""

from .constants import ENDPOINTS, WORLDS, RateCategory, Stage
from .settings import Settings, get_settings, reload_settings

__all__ = [
    "ENDPOINTS",
    "WORLDS",
    "RateCategory",
    "Stage",
    "Settings",
    "get_settings",
    "reload_settings",
]
