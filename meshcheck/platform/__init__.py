"""Platform abstraction layer."""

from .detection import (
    Platform,
    detect_platform,
    is_macos,
    is_windows,
)
from .paths import (
    home,
    self_path,
    user_config_dir,
)
from .process import (
    ProcessError,
    run,
)

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "is_macos",
    "is_windows",
    # paths
    "home",
    "self_path",
    "user_config_dir",
    # process
    "ProcessError",
    "run",
]
