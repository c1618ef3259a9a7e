"""Typed configuration loading and access.

This module provides dataclasses for the config.toml structure with
full type safety and validation.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_table

__all__ = [
    "CheckConfig",
    "ClusterConfig",
    "Config",
    "ConfigError",
    "OutputFormat",
    "config_path",
    "load_config",
    "load_config_or_default",
    "DEFAULT_WAIT",
    "DEFAULT_KUBECTL",
    "DEFAULT_EXTENSION_LABEL",
    "CONFIG_ENV_VAR",
]

DEFAULT_WAIT = "5m0s"
DEFAULT_KUBECTL = "kubectl"
DEFAULT_EXTENSION_LABEL = "linkerd.io/extension"

CONFIG_ENV_VAR = "MESHCHECK_CONFIG"


class OutputFormat(StrEnum):
    """Rendering mode of the check command."""

    TABLE = "table"
    JSON = "json"
    SHORT = "short"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class CheckConfig:
    """Defaults for the check command.

    Attributes:
        output: Default output format.
        wait: Go-style duration forwarded to extensions as ``--wait``.
        extension_timeout: Seconds before an extension is abandoned (None waits forever).
        hint_base_url: Overrides the version-derived hint base URL.
    """

    output: OutputFormat = OutputFormat.TABLE
    wait: str = DEFAULT_WAIT
    extension_timeout: float | None = None
    hint_base_url: str | None = None


@dataclass(frozen=True, slots=True)
class ClusterConfig:
    """How installed extensions are read from the cluster."""

    kubectl: str = DEFAULT_KUBECTL
    extension_label: str = DEFAULT_EXTENSION_LABEL


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    check: CheckConfig = field(default_factory=CheckConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a value is present but invalid.
        """
        check: StrDict = get_table(data, "check") or {}
        cluster: StrDict = get_table(data, "cluster") or {}

        output = get_str(check, "output") or OutputFormat.TABLE.value
        timeout = get_number(check, "extension_timeout")
        if timeout is not None and timeout < 0:
            raise ValueError("check.extension_timeout must not be negative")

        return cls(
            check=CheckConfig(
                output=OutputFormat(output),
                wait=get_str(check, "wait") or DEFAULT_WAIT,
                extension_timeout=timeout or None,
                hint_base_url=get_str(check, "hint_base_url"),
            ),
            cluster=ClusterConfig(
                kubectl=get_str(cluster, "kubectl") or DEFAULT_KUBECTL,
                extension_label=get_str(cluster, "extension_label") or DEFAULT_EXTENSION_LABEL,
            ),
        )


def config_path() -> Path:
    """Location of the user config file.

    ``$MESHCHECK_CONFIG`` wins; otherwise ``<user config dir>/config.toml``.
    """
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()

    from meshcheck.platform.paths import user_config_dir

    return user_config_dir() / "config.toml"


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or return the defaults if the file doesn't exist.

    An existing but invalid file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
