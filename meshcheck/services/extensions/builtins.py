# SPDX-License-Identifier: MIT
"""Built-in extensions.

Built-in extensions ship with the CLI itself instead of as separate
``linkerd-*`` executables. Their names form a fixed allow-list; a cluster
label matching one of them never requires an executable on PATH.

A built-in can be served in-process by registering a handler. A handler
receives the forwarded check flags and returns the extension's results.
Built-ins without a handler are dispatched by re-running the current
executable as ``<self> <name> check ...``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from meshcheck.services.checkers.base import CheckResult

__all__ = [
    "BUILTIN_EXTENSIONS",
    "BuiltinHandler",
    "BuiltinRegistry",
]

BUILTIN_EXTENSIONS: frozenset[str] = frozenset({"jaeger", "multicluster", "viz"})

type BuiltinHandler = Callable[[list[str]], Iterable[CheckResult]]


def _empty_handlers() -> dict[str, BuiltinHandler]:
    return {}


@dataclass
class BuiltinRegistry:
    """Allow-list of built-in extension names plus their in-process handlers."""

    names: frozenset[str] = BUILTIN_EXTENSIONS
    handlers: dict[str, BuiltinHandler] = field(default_factory=_empty_handlers)

    @classmethod
    def with_handlers(cls, handlers: Mapping[str, BuiltinHandler]) -> BuiltinRegistry:
        registry = cls()
        for name, handler in handlers.items():
            registry.register(name, handler)
        return registry

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def register(self, name: str, handler: BuiltinHandler) -> None:
        """Serve the built-in ``name`` in-process.

        Raises:
            ValueError: If ``name`` is not a known built-in extension.
        """
        if name not in self.names:
            raise ValueError(f"unknown built-in extension: {name}")
        self.handlers[name] = handler

    def handler(self, name: str) -> BuiltinHandler | None:
        return self.handlers.get(name)
