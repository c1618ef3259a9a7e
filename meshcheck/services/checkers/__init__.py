# SPDX-License-Identifier: MIT
"""Checker modules and the shared check result model.

- CheckResult: the unit of check output, shared by built-in checks and extensions
- KubectlChecker: the built-in check category run before any extension
"""

from meshcheck.services.checkers.base import CheckResult, CheckStatus
from meshcheck.services.checkers.common import (
    CommandRunner,
    DefaultCommandRunner,
    DirectoryLister,
    GlobDirectoryLister,
    hint_base_url,
)
from meshcheck.services.checkers.kubectl import KubectlChecker

__all__ = [
    # Result types
    "CheckResult",
    "CheckStatus",
    # Capabilities
    "CommandRunner",
    "DefaultCommandRunner",
    "DirectoryLister",
    "GlobDirectoryLister",
    "hint_base_url",
    # Checkers
    "KubectlChecker",
]
