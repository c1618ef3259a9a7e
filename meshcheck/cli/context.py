from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

import typer

from meshcheck.core.config import Config, config_path, load_config_or_default
from meshcheck.core.errors import ErrorCode
from meshcheck.core.result import Err
from meshcheck.output.console import ConsoleProtocol, RichConsole

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def build_context() -> CLIContext:
    path = config_path()
    result = load_config_or_default(path)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        if result.error.hint:
            typer.echo(f"hint: {result.error.hint}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=result.value, console=RichConsole())
