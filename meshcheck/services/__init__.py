# SPDX-License-Identifier: MIT
"""Application services for the check command.

Services implement the business logic of the application, coordinating
between the domain layer (core/) and infrastructure (platform/).
"""

from meshcheck.services.checkers import CheckResult, CheckStatus

__all__ = [
    "CheckResult",
    "CheckStatus",
]
