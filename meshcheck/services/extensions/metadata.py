# SPDX-License-Identifier: MIT
"""Extension metadata probe.

Before an executable found on PATH is trusted to run unconditionally, it is
asked who it is: ``<candidate> _extension-metadata`` must exit 0 and print an
ExtensionMetadata document whose ``name`` matches the candidate's own file
name (case-insensitively) and whose ``checks`` is ``"always"``. A versioned
copy such as ``linkerd-foo-v1.2.3`` reporting ``linkerd-foo`` is rejected.

Every failure is soft: the candidate is simply not an "always" extension.
"""

from __future__ import annotations

import logging
import os
import subprocess

from meshcheck.core.result import Err, Ok, Result
from meshcheck.services.checkers.common import CommandRunner
from meshcheck.services.extensions.wire import (
    METADATA_SUBCOMMAND,
    ExtensionMetadata,
    parse_metadata,
)

__all__ = ["probe_metadata", "is_always_check"]

logger = logging.getLogger(__name__)


def probe_metadata(
    path: str, runner: CommandRunner, *, timeout: float | None = None
) -> Result[ExtensionMetadata, str]:
    """Run the metadata subcommand of ``path`` and parse what it reports."""
    try:
        proc = runner.run([path, METADATA_SUBCOMMAND], timeout=timeout)
    except (OSError, subprocess.SubprocessError) as e:
        return Err(f"running {path} {METADATA_SUBCOMMAND}: {e}")

    if proc.returncode != 0:
        return Err(f"{path} {METADATA_SUBCOMMAND} exited with status {proc.returncode}")

    return parse_metadata(proc.stdout or "")


def is_always_check(path: str, runner: CommandRunner, *, timeout: float | None = None) -> bool:
    """True if ``path`` identifies as itself and asks to always be run."""
    match probe_metadata(path, runner, timeout=timeout):
        case Err(error):
            logger.debug("metadata probe rejected %s: %s", path, error)
            return False
        case Ok(metadata):
            filename = os.path.basename(path)
            if metadata.name.casefold() != filename.casefold():
                logger.debug("metadata probe rejected %s: reports name %r", path, metadata.name)
                return False
            return metadata.always
