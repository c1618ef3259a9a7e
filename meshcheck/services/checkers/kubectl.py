# SPDX-License-Identifier: MIT
"""kubectl checker.

Validates that the kubectl client used to read installed extensions from the
cluster is present and runnable.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field

from meshcheck.core.config import DEFAULT_KUBECTL
from meshcheck.services.checkers.base import CheckResult
from meshcheck.services.checkers.common import CommandRunner, DefaultCommandRunner, first_line

CATEGORY = "kubectl"


@dataclass(frozen=True, slots=True)
class KubectlChecker:
    """Check that kubectl is installed.

    Attributes:
        kubectl: Executable name or path
        runner: Command runner for lookups and version checks
    """

    kubectl: str = DEFAULT_KUBECTL
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)

    def check_all(self) -> list[CheckResult]:
        """Run all kubectl checks."""
        found = self.check_installed()
        if not found.ok:
            return [found]
        return [found, self.check_client_version()]

    def run_checks(self, observer: Callable[[CheckResult], None]) -> None:
        for result in self.check_all():
            observer(result)

    def check_installed(self) -> CheckResult:
        description = f"{self.kubectl} executable is available"
        if self.runner.look_path(self.kubectl) is None:
            return CheckResult(
                category=CATEGORY,
                description=description,
                err=f'exec: "{self.kubectl}": executable file not found in $PATH',
                hint_anchor="kubectl",
            )
        return CheckResult.success(CATEGORY, description)

    def check_client_version(self) -> CheckResult:
        description = f"{self.kubectl} client reports its version"
        try:
            proc = self.runner.run([self.kubectl, "version", "--client"], timeout=30)
        except (OSError, subprocess.SubprocessError) as e:
            return CheckResult.warning_result(CATEGORY, description, str(e))

        if proc.returncode != 0:
            detail = first_line(proc.stderr) or f"exit status {proc.returncode}"
            return CheckResult.warning_result(CATEGORY, description, detail)

        version = first_line(proc.stdout)
        if version:
            description = f"{description}: {version}"
        return CheckResult.success(CATEGORY, description)
