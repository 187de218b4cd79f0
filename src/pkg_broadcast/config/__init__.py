"""
pkg_broadcast.config

- BroadcasterSettings: API key, token expiry and public channel policy.
- settings_from_env: builds settings from ABLY_* environment variables.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import BroadcasterSettings

__all__ = [
    "BroadcasterSettings",
    "settings_from_env",
]
