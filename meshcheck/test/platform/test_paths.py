"""Tests for meshcheck.platform.paths module."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from meshcheck.platform.paths import (
    APP_NAME,
    clear_caches,
    home,
    self_path,
    user_config_dir,
)


@pytest.fixture(autouse=True)
def clear_path_caches() -> None:
    """Clear path caches before each test."""
    clear_caches()


class TestHome:
    """Test home directory detection."""

    def test_returns_path(self) -> None:
        assert isinstance(home(), Path)

    def test_uses_userprofile_on_windows(self) -> None:
        test_path = r"C:\Users\TestUser"
        with (
            patch("meshcheck.platform.paths.is_windows", return_value=True),
            patch.dict(os.environ, {"USERPROFILE": test_path}),
        ):
            clear_caches()
            assert home() == Path(test_path)

    def test_uses_home_on_unix(self) -> None:
        test_path = "/home/testuser"
        with (
            patch("meshcheck.platform.paths.is_windows", return_value=False),
            patch.dict(os.environ, {"HOME": test_path}),
        ):
            clear_caches()
            assert home() == Path(test_path)

    def test_is_cached(self) -> None:
        assert home() is home()


class TestUserConfigDir:
    def test_xdg(self, tmp_path: Path) -> None:
        with (
            patch("meshcheck.platform.paths.is_windows", return_value=False),
            patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}),
        ):
            clear_caches()
            assert user_config_dir() == tmp_path / APP_NAME

    def test_linux_default(self) -> None:
        env = {k: v for k, v in os.environ.items() if k != "XDG_CONFIG_HOME"}
        env["HOME"] = "/home/testuser"
        with (
            patch("meshcheck.platform.paths.is_windows", return_value=False),
            patch("meshcheck.platform.paths.is_macos", return_value=False),
            patch.dict(os.environ, env, clear=True),
        ):
            clear_caches()
            assert user_config_dir() == Path("/home/testuser/.config") / APP_NAME

    def test_macos_default(self) -> None:
        env = {k: v for k, v in os.environ.items() if k != "XDG_CONFIG_HOME"}
        env["HOME"] = "/Users/testuser"
        with (
            patch("meshcheck.platform.paths.is_windows", return_value=False),
            patch("meshcheck.platform.paths.is_macos", return_value=True),
            patch.dict(os.environ, env, clear=True),
        ):
            clear_caches()
            expected = Path("/Users/testuser/Library/Application Support") / APP_NAME
            assert user_config_dir() == expected

    def test_windows_appdata(self) -> None:
        with (
            patch("meshcheck.platform.paths.is_windows", return_value=True),
            patch.dict(os.environ, {"APPDATA": r"C:\Users\T\AppData\Roaming"}),
        ):
            clear_caches()
            assert user_config_dir() == Path(r"C:\Users\T\AppData\Roaming") / APP_NAME


class TestSelfPath:
    def test_argv0(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["/usr/local/bin/meshcheck", "check"])
        assert self_path() == "/usr/local/bin/meshcheck"

    def test_falls_back_to_interpreter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", [""])
        assert self_path() == sys.executable
