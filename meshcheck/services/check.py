from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from meshcheck.core.result import Err, Ok, Result
from meshcheck.output.report import Aggregator
from meshcheck.platform.paths import self_path
from meshcheck.services.checkers import (
    CheckResult,
    CommandRunner,
    DefaultCommandRunner,
    DirectoryLister,
    GlobDirectoryLister,
)
from meshcheck.services.checkers.common import DEFAULT_HINT_BASE_URL
from meshcheck.services.cluster import ClusterError
from meshcheck.services.extensions import (
    BuiltinRegistry,
    Discovery,
    ExtensionExecutor,
    find_extensions,
)
from meshcheck.services.extensions.executor import EXTENSIONS_HINT_ANCHOR

__all__ = [
    "EXTENSIONS_HEADER",
    "LABELS_CATEGORY",
    "FORWARDED_FLAGS",
    "CheckService",
    "HealthChecker",
    "extension_check_flags",
]

EXTENSIONS_HEADER = "Linkerd extensions checks"
LABELS_CATEGORY = "linkerd-extensions"

# Flags of the check command that extensions understand too.
FORWARDED_FLAGS = (
    "api-addr",
    "context",
    "as",
    "as-group",
    "kubeconfig",
    "linkerd-namespace",
    "verbose",
    "namespace",
    "proxy",
    "wait",
)


class HealthChecker(Protocol):
    """A built-in check category feeding results to an observer."""

    def run_checks(self, observer: Callable[[CheckResult], None]) -> None: ...


def extension_check_flags(values: Mapping[str, object]) -> list[str]:
    """Re-serialize the check command's flags for an extension's ``check``.

    Only FORWARDED_FLAGS with a non-empty value are kept, as ``--name=value``;
    booleans become ``true``/``false`` and sequences repeat the flag. JSON
    output is always requested.
    """
    flags: list[str] = []
    for name in FORWARDED_FLAGS:
        value = values.get(name)
        if value is None:
            continue
        if isinstance(value, bool):
            flags.append(f"--{name}={'true' if value else 'false'}")
        elif isinstance(value, (list, tuple)):
            flags.extend(f"--{name}={item}" for item in value if str(item))
        elif str(value):
            flags.append(f"--{name}={value}")
    flags.append("--output=json")
    return flags


@dataclass
class CheckService:
    """Runs built-in checks, then every extension, into one aggregator.

    Attributes:
        checkers: Built-in check categories, run first and in order
        runner: Command runner for extension probes and checks
        lister: Glob capability for extension discovery
        builtins: Built-in extension allow-list and handlers
        path_env: Search list for ``linkerd-*`` executables (default: $PATH)
        flags: Flags forwarded to extensions
        timeout: Per-extension timeout in seconds
        hint_base_url: Base URL for hints on synthesized results
        label_source: Reads installed extension names from the cluster
    """

    checkers: Sequence[HealthChecker] = ()
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)
    lister: DirectoryLister = field(default_factory=GlobDirectoryLister)
    builtins: BuiltinRegistry = field(default_factory=BuiltinRegistry)
    path_env: str | None = None
    flags: Sequence[str] = ()
    timeout: float | None = None
    hint_base_url: str = DEFAULT_HINT_BASE_URL
    label_source: Callable[[], Result[list[str], ClusterError]] | None = None

    def discover(self, ns_labels: Iterable[str]) -> Discovery:
        path_env = self.path_env if self.path_env is not None else os.environ.get("PATH", "")
        return find_extensions(
            path_env,
            self.lister,
            self.runner,
            ns_labels,
            builtins=self.builtins,
            self_path=self_path(),
            probe_timeout=self.timeout,
        )

    def run(self, aggregator: Aggregator, ns_labels: Iterable[str] = ()) -> bool:
        """Run everything and return the verdict.

        ``ns_labels`` are added to whatever ``label_source`` reports.
        """
        for checker in self.checkers:
            checker.run_checks(aggregator)

        labels = list(ns_labels)
        if self.label_source is not None:
            match self.label_source():
                case Err(error):
                    aggregator(
                        CheckResult(
                            category=LABELS_CATEGORY,
                            description="can list the extensions installed on the cluster",
                            err=error.message,
                            hint_url=f"{self.hint_base_url}{EXTENSIONS_HINT_ANCHOR}",
                        )
                    )
                case Ok(found):
                    labels.extend(label for label in found if label not in labels)

        discovery = self.discover(labels)
        if discovery.extensions or discovery.missing:
            aggregator.section(EXTENSIONS_HEADER)

        executor = ExtensionExecutor(
            runner=self.runner,
            builtins=self.builtins,
            flags=self.flags,
            timeout=self.timeout,
            hint_base_url=self.hint_base_url,
            on_start=lambda name: aggregator.progress(f"Running {name} extension check"),
        )
        executor.run(discovery.extensions, discovery.missing, aggregator)

        return aggregator.finish()
