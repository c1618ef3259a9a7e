# SPDX-License-Identifier: MIT
"""Base types for checkers."""

from dataclasses import dataclass
from enum import Enum


class CheckStatus(Enum):
    """Status of a check result.

    Values are the ``result`` strings of the JSON wire format.
    """

    OK = "success"
    """Check passed successfully."""

    WARNING = "warning"
    """Check failed, but the failure is advisory."""

    ERROR = "error"
    """Check failed and fails the whole run."""


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single check.

    Producers emit results grouped by category; consecutive results sharing a
    category are rendered as one group.

    Attributes:
        category: Grouping key (e.g. "kubernetes-api", "linkerd-viz")
        description: What was checked
        err: Error message; None means the check passed
        warning: With ``err`` set, the failure is advisory, not fatal
        retry: The check is still polling and this result is not final
        hint_anchor: Anchor appended to the hint base URL
        hint_url: Full remediation URL (wins over ``hint_anchor``)
    """

    category: str
    description: str
    err: str | None = None
    warning: bool = False
    retry: bool = False
    hint_anchor: str | None = None
    hint_url: str | None = None

    @property
    def status(self) -> CheckStatus:
        if self.err is None:
            return CheckStatus.OK
        if self.warning:
            return CheckStatus.WARNING
        return CheckStatus.ERROR

    @property
    def ok(self) -> bool:
        """Return True if check passed (OK or WARNING)."""
        return self.status != CheckStatus.ERROR

    @property
    def is_error(self) -> bool:
        """Return True if this is a final, fatal failure."""
        return not self.retry and self.status == CheckStatus.ERROR

    @property
    def is_warning(self) -> bool:
        """Return True if this is a final, advisory failure."""
        return not self.retry and self.status == CheckStatus.WARNING

    def hint(self, base_url: str) -> str | None:
        """Remediation URL, resolving ``hint_anchor`` against ``base_url``."""
        if self.hint_url:
            return self.hint_url
        if self.hint_anchor:
            return f"{base_url}{self.hint_anchor}"
        return None

    @classmethod
    def success(cls, category: str, description: str) -> "CheckResult":
        """Create a successful check result."""
        return cls(category=category, description=description)

    @classmethod
    def warning_result(
        cls, category: str, description: str, err: str, hint_url: str | None = None
    ) -> "CheckResult":
        """Create a warning check result."""
        return cls(
            category=category, description=description, err=err, warning=True, hint_url=hint_url
        )

    @classmethod
    def error(
        cls, category: str, description: str, err: str, hint_url: str | None = None
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(category=category, description=description, err=err, hint_url=hint_url)
