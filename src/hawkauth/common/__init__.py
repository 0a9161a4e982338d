"""Common utilities for hawkauth."""

from hawkauth.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
