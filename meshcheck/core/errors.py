"""Error codes for CLI exit status.

The check command exits non-zero if and only if the aggregate verdict is a
failure, or if the run could not start at all.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: All checks passed (warnings allowed)
    - 1: At least one check failed
    - 2: User error (bad option value, invalid config file)
    - 3: Environment error (a required tool could not be run)
    """

    OK = 0
    CHECK_FAILED = 1
    USER_ERROR = 2
    ENV_ERROR = 3
