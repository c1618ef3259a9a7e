# SPDX-License-Identifier: MIT
"""Extension executor.

Runs each extension's ``check`` subcommand and turns whatever comes back into
check results. Nothing an extension does escapes as an exception: a crash,
a timeout or unparseable output becomes exactly one failed result naming the
command that was run, so a broken plugin is always visible and attributable.

Extensions run one at a time; each extension's results are handed to the
observer before the next extension starts.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from meshcheck.core.result import Err, Ok
from meshcheck.services.checkers.base import CheckResult
from meshcheck.services.checkers.common import (
    DEFAULT_HINT_BASE_URL,
    CommandRunner,
    DefaultCommandRunner,
)
from meshcheck.services.extensions.builtins import BuiltinHandler, BuiltinRegistry
from meshcheck.services.extensions.discovery import Extension
from meshcheck.services.extensions.wire import parse_check_output

__all__ = [
    "ExtensionRunner",
    "ProcessRunner",
    "InProcessRunner",
    "ExtensionExecutor",
    "missing_extension_result",
    "EXTENSIONS_HINT_ANCHOR",
]

logger = logging.getLogger(__name__)

EXTENSIONS_HINT_ANCHOR = "extensions"

type ResultObserver = Callable[[CheckResult], None]


class ExtensionRunner(Protocol):
    """Runs one extension's checks and never raises."""

    def run(self, flags: Sequence[str]) -> list[CheckResult]: ...


@dataclass(frozen=True, slots=True)
class ProcessRunner:
    """Runs an extension as a subprocess: ``<path> [<prefix>...] check <flags>``.

    Attributes:
        path: Executable to run
        prefix: Arguments placed before ``check`` (the built-in name on self-dispatch)
        runner: Command runner
        timeout: Seconds before the extension is abandoned (None waits forever)
        hint_base_url: Base URL for the hint on synthesized failures
    """

    path: str
    prefix: tuple[str, ...] = ()
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)
    timeout: float | None = None
    hint_base_url: str = DEFAULT_HINT_BASE_URL

    @property
    def category(self) -> str:
        return os.path.basename(self.path)

    def args(self, flags: Sequence[str]) -> list[str]:
        return [*self.prefix, "check", *flags]

    def command_line(self, flags: Sequence[str]) -> str:
        return " ".join([self.path, *self.args(flags)])

    def run(self, flags: Sequence[str]) -> list[CheckResult]:
        args = self.args(flags)
        command = self.command_line(flags)
        try:
            proc = self.runner.run([self.path, *args], timeout=self.timeout)
            stdout, stderr = proc.stdout or "", proc.stderr or ""
        except subprocess.TimeoutExpired:
            logger.debug("%s timed out after %ss", command, self.timeout)
            return [self._failure(command, f"timed out after {self.timeout}s")]
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("%s could not be run: %s", command, e)
            return [self._failure(command, str(e))]

        match parse_check_output(stdout):
            case Ok(results):
                return results
            case Err(error):
                logger.debug("%s produced invalid output: %s", command, error)
                if stderr:
                    return [self._failure(command, stderr)]
                return [
                    self._failure(
                        command,
                        f'invalid extension check output from "{command}" (JSON object expected):\n'
                        f"{stdout}\n[{error}]",
                    )
                ]

    def _failure(self, command: str, err: str) -> CheckResult:
        return CheckResult(
            category=self.category,
            description=f"Running: {command}",
            err=err,
            hint_url=f"{self.hint_base_url}{EXTENSIONS_HINT_ANCHOR}",
        )


@dataclass(frozen=True, slots=True)
class InProcessRunner:
    """Runs a built-in extension's handler inside the current process.

    Any exception raised by the handler becomes a single failed result, the
    same way a crashing subprocess would.
    """

    name: str
    handler: BuiltinHandler
    hint_base_url: str = DEFAULT_HINT_BASE_URL

    def run(self, flags: Sequence[str]) -> list[CheckResult]:
        try:
            return list(self.handler(list(flags)))
        except Exception as e:
            logger.debug("built-in extension %s raised", self.name, exc_info=True)
            command = " ".join([self.name, "check", *flags])
            return [
                CheckResult(
                    category=self.name,
                    description=f"Running: {command}",
                    err=f"{type(e).__name__}: {e}",
                    hint_url=f"{self.hint_base_url}{EXTENSIONS_HINT_ANCHOR}",
                )
            ]


def missing_extension_result(name: str, hint_base_url: str = DEFAULT_HINT_BASE_URL) -> CheckResult:
    """Warning for an extension the cluster declares but no executable provides."""
    return CheckResult(
        category=name,
        description=f"Linkerd extension command {name} exists",
        err=f'exec: "{name}": executable file not found in $PATH',
        warning=True,
        hint_url=f"{hint_base_url}{EXTENSIONS_HINT_ANCHOR}",
    )


@dataclass
class ExtensionExecutor:
    """Dispatches discovered extensions and feeds their results to an observer.

    Attributes:
        runner: Command runner used for subprocess extensions
        builtins: Built-in registry; built-ins with a handler run in-process
        flags: Flags forwarded to every extension's ``check`` subcommand
        timeout: Per-extension timeout in seconds (None waits forever)
        hint_base_url: Base URL for hints on synthesized results
        on_start: Called with the extension name before it runs
    """

    runner: CommandRunner = field(default_factory=DefaultCommandRunner)
    builtins: BuiltinRegistry = field(default_factory=BuiltinRegistry)
    flags: Sequence[str] = ()
    timeout: float | None = None
    hint_base_url: str = DEFAULT_HINT_BASE_URL
    on_start: Callable[[str], None] | None = None

    def runner_for(self, extension: Extension) -> ExtensionRunner:
        if extension.is_builtin:
            handler = self.builtins.handler(extension.builtin)
            if handler is not None:
                return InProcessRunner(extension.builtin, handler, self.hint_base_url)
            prefix: tuple[str, ...] = (extension.builtin,)
        else:
            prefix = ()
        return ProcessRunner(
            path=extension.path,
            prefix=prefix,
            runner=self.runner,
            timeout=self.timeout,
            hint_base_url=self.hint_base_url,
        )

    def run(
        self,
        extensions: Iterable[Extension],
        missing: Iterable[str],
        observer: ResultObserver,
    ) -> None:
        """Run every extension in order, then report every missing one."""
        for extension in extensions:
            if self.on_start is not None:
                self.on_start(extension.name)
            for result in self.runner_for(extension).run(self.flags):
                observer(result)

        for name in missing:
            observer(missing_extension_result(name, self.hint_base_url))
