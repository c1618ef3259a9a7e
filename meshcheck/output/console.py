"""Console output abstraction.

This module provides a protocol for console output that can be implemented
by different backends (Rich, mock for testing). Check reports must be
byte-exact when not attached to a terminal, so the Rich backend disables
markup, emoji codes, highlighting and wrapping: a line is printed exactly as
given, and only glyph colours and the spinner differ on a TTY.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import IO, TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.status import Status

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()  # Green, positive result
    ERROR = auto()  # Red, failed result
    WARNING = auto()  # Yellow, advisory result
    DIM = auto()  # Dimmed/muted text
    BOLD = auto()  # Bold text

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output.

    Implementations can use Rich or capture output for testing.
    """

    @property
    def is_terminal(self) -> bool:
        """True if stdout is an interactive terminal (spinners are allowed)."""
        ...

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message verbatim, followed by a newline."""
        ...

    def mark(self, glyph: str, style: Style, message: str) -> None:
        """Print ``"<glyph> <message>"`` with only the glyph styled."""
        ...

    def newline(self) -> None:
        """Print an empty line."""
        ...

    def error(self, message: str) -> None:
        """Print an error message to the error stream."""
        ...

    def status(self, message: str) -> None:
        """Start the spinner, or update its text if already running."""
        ...

    def stop_status(self) -> None:
        """Stop the spinner if running."""
        ...


class RichConsole:
    """Console implementation using Rich library.

    This is the production implementation that uses Rich for styled output.
    """

    def __init__(
        self,
        file: IO[str] | None = None,
        err_file: IO[str] | None = None,
        *,
        force_terminal: bool | None = None,
    ) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        options: dict[str, bool] = {
            "markup": False,
            "emoji": False,
            "highlight": False,
            "soft_wrap": True,
        }
        self._console = Console(file=file, force_terminal=force_terminal, **options)
        self._err_console = Console(
            file=err_file, stderr=err_file is None, force_terminal=force_terminal, **options
        )
        self._status: Status | None = None
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green bold",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow bold",
            Style.DIM: "dim",
            Style.BOLD: "bold",
        }

    @property
    def is_terminal(self) -> bool:
        return self._console.is_terminal

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        from rich.text import Text

        self._console.print(Text(message, style=self._style_map.get(style, "")))

    def mark(self, glyph: str, style: Style, message: str) -> None:
        from rich.text import Text

        self._console.print(Text.assemble((glyph, self._style_map.get(style, "")), " ", message))

    def newline(self) -> None:
        self._console.print()

    def error(self, message: str) -> None:
        from rich.text import Text

        self._err_console.print(Text(message))

    def status(self, message: str) -> None:
        if self._status is None:
            self._status = self._console.status(message, spinner="dots")
            self._status.start()
        else:
            self._status.update(message)

    def stop_status(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    """Factory for empty outputs list (helps type inference)."""
    return []


def _empty_strings() -> list[str]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing.

    Use this in tests to verify what would have been printed without
    actually printing anything.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    errors: list[str] = field(default_factory=_empty_strings)
    statuses: list[str] = field(default_factory=_empty_strings)
    terminal: bool = False
    spinning: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.terminal

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def mark(self, glyph: str, style: Style, message: str) -> None:
        self.outputs.append(OutputRecord(f"{glyph} {message}", style))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    def error(self, message: str) -> None:
        self.errors.append(message)

    def status(self, message: str) -> None:
        self.statuses.append(message)
        self.spinning = True

    def stop_status(self) -> None:
        self.spinning = False

    # Test helper methods

    @property
    def messages(self) -> list[str]:
        """Get all output messages as a list of strings."""
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """Get all output as a single newline-terminated string."""
        return "".join(f"{m}\n" for m in self.messages)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        """Count outputs with a specific style."""
        return sum(1 for o in self.outputs if o.style == style)
