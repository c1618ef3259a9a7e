# SPDX-License-Identifier: MIT
"""Common utilities for checkers and extensions.

This module provides shared functionality used by checkers and by the
extension discovery/dispatch code:
- CommandRunner protocol for subprocess abstraction
- DirectoryLister protocol for glob abstraction
- Hint base URL resolution
- Common helper functions
"""

from __future__ import annotations

import glob
import re
import shutil
import subprocess
from typing import Protocol

__all__ = [
    "CommandRunner",
    "DefaultCommandRunner",
    "DirectoryLister",
    "GlobDirectoryLister",
    "DEFAULT_HINT_BASE_URL",
    "hint_base_url",
    "first_line",
]

DEFAULT_HINT_BASE_URL = "https://linkerd.io/2/checks/#"

_STABLE_VERSION_RE = re.compile(r"stable-(\d\.\d+)\.")


class CommandRunner(Protocol):
    """Protocol for running commands and resolving executables.

    This abstraction allows mocking subprocess calls in tests.
    """

    def run(
        self, args: list[str], *, timeout: float | None = None
    ) -> subprocess.CompletedProcess[str]:
        """Run a command to completion with stdout/stderr captured and no stdin.

        Output is decoded as UTF-8; undecodable bytes become U+FFFD.

        Raises:
            OSError: If the executable cannot be started.
            subprocess.TimeoutExpired: If ``timeout`` elapses first.
        """
        ...

    def look_path(self, path: str) -> str | None:
        """Return the resolved executable path, or None if not executable."""
        ...


class DefaultCommandRunner:
    """Default command runner using subprocess.run."""

    def run(
        self, args: list[str], *, timeout: float | None = None
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            args,
            capture_output=True,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            check=False,
            timeout=timeout,
        )

    def look_path(self, path: str) -> str | None:
        return shutil.which(path)


class DirectoryLister(Protocol):
    """Protocol for listing files matching a glob pattern."""

    def glob(self, pattern: str) -> list[str]:
        """Return paths matching ``pattern``.

        Raises:
            OSError: If the directory cannot be read.
        """
        ...


class GlobDirectoryLister:
    """Directory lister backed by the glob module."""

    def glob(self, pattern: str) -> list[str]:
        return glob.glob(pattern)


def hint_base_url(version: str) -> str:
    """Base URL that check hints point to for a given CLI version.

    ``stable-2.9.1`` maps to ``https://linkerd.io/2.9/checks/#``; any other
    version maps to the default base.
    """
    match = _STABLE_VERSION_RE.search(version)
    if match is None:
        return DEFAULT_HINT_BASE_URL
    return f"https://linkerd.io/{match.group(1)}/checks/#"


def first_line(text: str) -> str:
    """Extract first non-empty line from text.

    Useful for parsing version output from commands.
    """
    for line in text.strip().splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""
