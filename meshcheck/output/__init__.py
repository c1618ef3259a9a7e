"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .report import (
    Aggregator,
    JsonRenderer,
    TableRenderer,
    make_renderer,
    print_summary,
)

__all__ = [
    "Aggregator",
    "ConsoleProtocol",
    "JsonRenderer",
    "MockConsole",
    "RichConsole",
    "Style",
    "TableRenderer",
    "make_renderer",
    "print_summary",
]
