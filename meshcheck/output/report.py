"""Check result aggregation and rendering.

Results arrive one at a time, grouped by category, from built-in checkers and
from extensions. The Aggregator computes the verdict and forwards every
result to a renderer:

- TableRenderer streams a grouped, human-readable report, with a spinner for
  checks that are still retrying when attached to a terminal;
- JsonRenderer buffers everything and prints one document at the end.

Table output for one category looks like::

    linkerd-viz
    -----------
    √ viz extension Namespace exists
    ‼ prometheus is installed and configured correctly
        prometheus not found
        see https://linkerd.io/2/checks/#l5d-viz-prometheus for hints

The run succeeds unless a final (non-retry) result failed without being a
warning. Warnings are tracked separately.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Protocol

from meshcheck.core.config import OutputFormat
from meshcheck.output.console import ConsoleProtocol, Style
from meshcheck.services.checkers.base import CheckResult, CheckStatus
from meshcheck.services.checkers.common import DEFAULT_HINT_BASE_URL
from meshcheck.services.extensions.wire import check_entry

__all__ = [
    "OK_GLYPH",
    "WARN_GLYPH",
    "FAIL_GLYPH",
    "ResultRenderer",
    "TableRenderer",
    "JsonRenderer",
    "Aggregator",
    "make_renderer",
    "print_summary",
]

OK_GLYPH = "√"
WARN_GLYPH = "‼"
FAIL_GLYPH = "×"

_GLYPHS: dict[CheckStatus, tuple[str, Style]] = {
    CheckStatus.OK: (OK_GLYPH, Style.SUCCESS),
    CheckStatus.WARNING: (WARN_GLYPH, Style.WARNING),
    CheckStatus.ERROR: (FAIL_GLYPH, Style.ERROR),
}


class ResultRenderer(Protocol):
    """Presentation of a stream of check results."""

    def render(self, result: CheckResult) -> None: ...

    def progress(self, message: str) -> None:
        """Show that work is in progress (e.g. an extension is running)."""
        ...

    def section(self, title: str) -> None:
        """Start a titled section (e.g. extension checks)."""
        ...

    def finish(self, success: bool) -> bool:
        """Flush the report. Returns False if it could not be produced."""
        ...


@dataclass
class TableRenderer:
    """Streams results as grouped lines.

    Built-in checks and extension checks form separate blocks. The first
    block always exists; a block after a section starts with its first
    result. A block ends with a blank line, except in short mode when
    nothing in it failed.

    Attributes:
        console: Output target
        hint_base_url: Base for results that only carry a hint anchor
        short: Only print results that did not pass
    """

    console: ConsoleProtocol
    hint_base_url: str = DEFAULT_HINT_BASE_URL
    short: bool = False
    _last_category: str | None = field(default=None, init=False)
    _grouped: bool = field(default=False, init=False)
    _block_open: bool = field(default=True, init=False)
    _block_failed: bool = field(default=False, init=False)

    def render(self, result: CheckResult) -> None:
        self._block_open = True
        if result.is_error or result.is_warning:
            self._block_failed = True
        if self.short and result.err is None:
            return

        self._enter_category(result.category)

        self.console.stop_status()
        if result.retry:
            if self.console.is_terminal:
                self.console.status(result.err or result.description)
            return

        glyph, style = _GLYPHS[result.status]
        self.console.mark(glyph, style, result.description)
        if result.err is None:
            return

        self.console.print(f"    {result.err}")
        hint = result.hint(self.hint_base_url)
        if hint:
            self.console.print(f"    see {hint} for hints")

    def progress(self, message: str) -> None:
        if self.console.is_terminal:
            self.console.status(message)

    def section(self, title: str) -> None:
        self.console.stop_status()
        self._end_block()
        self.console.newline()
        self.console.print(title, Style.BOLD)
        self.console.print("=" * len(title), Style.BOLD)
        self.console.newline()

    def finish(self, success: bool) -> bool:
        self.console.stop_status()
        self._end_block()
        return True

    def _end_block(self) -> None:
        if self._block_open and (not self.short or self._block_failed):
            self.console.newline()
        self._block_open = False
        self._last_category = None
        self._grouped = False
        self._block_failed = False

    def _enter_category(self, category: str) -> None:
        if category == self._last_category:
            return
        if self._grouped:
            self.console.newline()
        self.console.print(category)
        self.console.print("-" * len(category))
        self._last_category = category
        self._grouped = True


def _empty_categories() -> list[dict[str, object]]:
    return []


@dataclass
class JsonRenderer:
    """Buffers results and prints a single ``{success, categories}`` document."""

    console: ConsoleProtocol
    hint_base_url: str = DEFAULT_HINT_BASE_URL
    categories: list[dict[str, object]] = field(default_factory=_empty_categories)
    _checks: list[dict[str, str]] = field(default_factory=list, init=False)

    def render(self, result: CheckResult) -> None:
        if not self.categories or self.categories[-1]["categoryName"] != result.category:
            self._checks = []
            self.categories.append({"categoryName": result.category, "checks": self._checks})

        # Only final results are reported.
        if not result.retry:
            self._checks.append(check_entry(result, result.hint(self.hint_base_url)))

    def progress(self, message: str) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def finish(self, success: bool) -> bool:
        document = {"success": success, "categories": self.categories}
        try:
            text = json.dumps(document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self.console.error(f"JSON serialization of the check result failed with {e}")
            return False
        self.console.print(text)
        return True


@dataclass
class Aggregator:
    """Folds a stream of results into a verdict while rendering them.

    Instances are callable so they can be passed wherever a result observer
    is expected.
    """

    renderer: ResultRenderer
    success: bool = True
    warning: bool = False

    def __call__(self, result: CheckResult) -> None:
        self.observe(result)

    def observe(self, result: CheckResult) -> None:
        if result.is_error:
            self.success = False
        elif result.is_warning:
            self.warning = True
        self.renderer.render(result)

    def progress(self, message: str) -> None:
        self.renderer.progress(message)

    def section(self, title: str) -> None:
        self.renderer.section(title)

    def finish(self) -> bool:
        """Flush the renderer and return the final verdict."""
        if not self.renderer.finish(self.success):
            self.success = False
        return self.success


def make_renderer(
    output: OutputFormat,
    console: ConsoleProtocol,
    hint_base_url: str = DEFAULT_HINT_BASE_URL,
) -> ResultRenderer:
    if output == OutputFormat.JSON:
        return JsonRenderer(console, hint_base_url)
    return TableRenderer(console, hint_base_url, short=output == OutputFormat.SHORT)


def print_summary(console: ConsoleProtocol, output: OutputFormat, success: bool) -> None:
    """Print the one-line verdict (table and short output only)."""
    if output == OutputFormat.JSON:
        return
    if success:
        console.print(f"Status check results are {OK_GLYPH}", Style.SUCCESS)
    else:
        console.print(f"Status check results are {FAIL_GLYPH}", Style.ERROR)
