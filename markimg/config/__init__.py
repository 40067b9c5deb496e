"""Configuration module for MarkImg."""

from markimg.config.settings import (
    MarkimgSettings,
    OrganizerConfig,
    UploadsConfig,
    get_settings,
    reload_settings,
)

__all__ = [
    "MarkimgSettings",
    "OrganizerConfig",
    "UploadsConfig",
    "get_settings",
    "reload_settings",
]
