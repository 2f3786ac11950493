"""Configuration: process settings and connector config loading."""

from .settings import Settings, clear_settings_cache, get_settings
from .loader import load_connector_config, parse_connector_config

__all__ = [
    "Settings",
    "clear_settings_cache",
    "get_settings",
    "load_connector_config",
    "parse_connector_config",
]
