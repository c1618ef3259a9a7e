"""Platform-aware path utilities.

Locates user-level directories (home, config) and the running executable,
which built-in extensions record as their dispatch path.
"""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path

from .detection import is_macos, is_windows

__all__ = [
    "home",
    "self_path",
    "user_config_dir",
    "clear_caches",
]

# Application name used for directory naming
APP_NAME = "meshcheck"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Uses USERPROFILE on Windows, HOME on Unix.
    Falls back to Path.home() which handles edge cases.
    """
    # Check env vars first for CI/container scenarios
    if is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Get the user-level configuration directory.

    Location: ~/.config/meshcheck/ (Linux), ~/Library/Application Support/meshcheck/
    (macOS) or ~/AppData/Roaming/meshcheck/ (Windows).
    """
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    if is_macos():
        return home() / "Library" / "Application Support" / APP_NAME
    return home() / ".config" / APP_NAME


def self_path() -> str:
    """Path of the running executable, as invoked (argv[0])."""
    if sys.argv and sys.argv[0]:
        return sys.argv[0]
    return sys.executable


def clear_caches() -> None:
    """Clear all cached paths.

    Useful for testing when environment variables change.
    """
    home.cache_clear()
    user_config_dir.cache_clear()
