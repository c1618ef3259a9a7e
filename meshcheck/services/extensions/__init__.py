# SPDX-License-Identifier: MIT
"""Extension discovery and dispatch.

- discovery: finds ``linkerd-*`` executables and matches them to cluster labels
- metadata: the ``_extension-metadata`` trust probe
- executor: runs extensions and normalizes their output into check results
- builtins: the built-in extension allow-list and in-process handlers
- wire: JSON formats exchanged with extensions
"""

from meshcheck.services.extensions.builtins import BUILTIN_EXTENSIONS, BuiltinRegistry
from meshcheck.services.extensions.discovery import (
    Discovery,
    Extension,
    find_extensions,
    suffix,
)
from meshcheck.services.extensions.executor import (
    ExtensionExecutor,
    InProcessRunner,
    ProcessRunner,
    missing_extension_result,
)
from meshcheck.services.extensions.wire import ExtensionMetadata, parse_check_output

__all__ = [
    "BUILTIN_EXTENSIONS",
    "BuiltinRegistry",
    "Discovery",
    "Extension",
    "ExtensionExecutor",
    "ExtensionMetadata",
    "InProcessRunner",
    "ProcessRunner",
    "find_extensions",
    "missing_extension_result",
    "parse_check_output",
    "suffix",
]
