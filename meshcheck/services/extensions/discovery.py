# SPDX-License-Identifier: MIT
"""Extension discovery.

Finds the check providers for a run and reports the extensions the cluster
declares but that cannot be run:

1. every ``linkerd-*`` executable on PATH is a candidate (first PATH entry
   wins per suffix);
2. candidates whose metadata asks to "always" run are taken unconditionally;
3. candidates whose suffix matches a cluster label are taken;
4. remaining labels that name a built-in extension are dispatched through
   the CLI itself;
5. anything still unmatched is missing, reported as ``linkerd-<label>``.

Discovery never fails: unreadable directories, unresolvable paths and failed
probes only drop the candidate concerned.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass

from meshcheck.services.checkers.common import CommandRunner, DirectoryLister
from meshcheck.services.extensions.builtins import BuiltinRegistry
from meshcheck.services.extensions.metadata import is_always_check

__all__ = [
    "EXTENSION_PREFIX",
    "Extension",
    "Discovery",
    "find_extensions",
    "find_cli_extensions_on_path",
    "suffix",
]

logger = logging.getLogger(__name__)

EXTENSION_PREFIX = "linkerd-"


@dataclass(frozen=True, slots=True)
class Extension:
    """A check provider.

    Attributes:
        path: Executable to run; the CLI's own path for built-ins
        builtin: Built-in extension name, empty for executables found on PATH
    """

    path: str
    builtin: str = ""

    @property
    def is_builtin(self) -> bool:
        return self.builtin != ""

    @property
    def name(self) -> str:
        """Short name used in progress messages (``viz``, ``foo``)."""
        return self.builtin or suffix(self.path)

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)


@dataclass(frozen=True, slots=True)
class Discovery:
    """Outcome of discovery: what to run and what could not be found."""

    extensions: list[Extension]
    missing: list[str]


def suffix(path: str) -> str:
    """Extension name of an executable path.

    ``linkerd-foo`` -> ``foo``, ``linkerd-foo-bar`` -> ``foo-bar``,
    ``/usr/local/bin/linkerd-foo`` -> ``foo``; anything without the
    ``linkerd-`` prefix -> ``""``.
    """
    filename = os.path.basename(path)
    if not filename.startswith(EXTENSION_PREFIX):
        return ""
    return filename[len(EXTENSION_PREFIX) :]


def find_cli_extensions_on_path(
    path_env: str,
    lister: DirectoryLister,
    runner: CommandRunner,
    *,
    separator: str = os.pathsep,
) -> list[str]:
    """Unique ``linkerd-*`` executables on ``path_env``, in PATH order.

    When several directories hold the same extension, only the one from the
    earliest directory is kept.
    """
    executables: list[str] = []
    seen: set[str] = set()

    for directory in path_env.split(separator):
        if not directory:
            continue
        try:
            matches = sorted(lister.glob(os.path.join(directory, f"{EXTENSION_PREFIX}*")))
        except OSError as e:
            logger.debug("skipping %s: %s", directory, e)
            continue

        for match in matches:
            name = suffix(match)
            if not name or name in seen:
                continue

            resolved = runner.look_path(match)
            if resolved is None:
                logger.debug("skipping %s: not an executable", match)
                continue

            executables.append(resolved)
            seen.add(name)

    return executables


def _find_always_checks(
    candidates: Iterable[str], runner: CommandRunner, timeout: float | None
) -> tuple[list[Extension], set[str]]:
    extensions: list[Extension] = []
    seen: set[str] = set()

    for candidate in candidates:
        name = suffix(candidate)
        if name in seen:
            continue
        if is_always_check(candidate, runner, timeout=timeout):
            extensions.append(Extension(path=candidate))
            seen.add(name)

    return extensions, seen


def find_extensions(
    path_env: str,
    lister: DirectoryLister,
    runner: CommandRunner,
    ns_labels: Iterable[str],
    *,
    builtins: BuiltinRegistry | None = None,
    self_path: str = "",
    separator: str = os.pathsep,
    probe_timeout: float | None = None,
) -> Discovery:
    """Resolve the extensions to run for the given cluster labels.

    Args:
        path_env: PATH-like search list
        lister: Glob capability
        runner: Look-path and process capability (metadata probes)
        ns_labels: Extension names the cluster reports as installed
        builtins: Built-in allow-list (default: the standard built-ins)
        self_path: Path recorded on built-in extensions
        separator: PATH list separator
        probe_timeout: Seconds a metadata probe may take

    Returns:
        Extensions sorted by executable name then built-in name, and the
        sorted names of missing executables.
    """
    registry = builtins if builtins is not None else BuiltinRegistry()
    candidates = find_cli_extensions_on_path(path_env, lister, runner, separator=separator)

    extensions, always_seen = _find_always_checks(candidates, runner, probe_timeout)

    pending: set[str] = {label for label in ns_labels if label not in always_seen}

    for candidate in candidates:
        name = suffix(candidate)
        if name in pending:
            extensions.append(Extension(path=candidate))
            pending.discard(name)

    for label in sorted(pending):
        if label in registry:
            extensions.append(Extension(path=self_path, builtin=label))
            pending.discard(label)

    missing = sorted(f"{EXTENSION_PREFIX}{label}" for label in pending)
    extensions.sort(key=lambda e: (e.filename, e.builtin))

    logger.debug(
        "discovered extensions %s, missing %s", [e.builtin or e.path for e in extensions], missing
    )
    return Discovery(extensions=extensions, missing=missing)
