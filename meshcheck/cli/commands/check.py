from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

import typer

from meshcheck import __version__
from meshcheck.cli.commands._helpers import exit_on_error, exit_with_code
from meshcheck.cli.context import build_context, setup_logging
from meshcheck.core.config import OutputFormat
from meshcheck.core.errors import ErrorCode
from meshcheck.core.result import Err, Ok, Result
from meshcheck.output.report import Aggregator, make_renderer, print_summary
from meshcheck.services.check import CheckService, extension_check_flags
from meshcheck.services.checkers import KubectlChecker, hint_base_url
from meshcheck.services.cluster import KubeOptions, extension_labels

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UsageError:
    message: str
    hint: str | None = None


def check(
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format: table, json or short."
    ),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Path to the kubeconfig file."),
    context: str | None = typer.Option(None, "--context", help="Kubernetes context to use."),
    impersonate: str | None = typer.Option(None, "--as", help="Username to impersonate."),
    impersonate_group: list[str] | None = typer.Option(
        None, "--as-group", help="Group to impersonate (repeatable)."
    ),
    api_addr: str | None = typer.Option(None, "--api-addr", help="Kubernetes API server address."),
    linkerd_namespace: str = typer.Option(
        "linkerd", "--linkerd-namespace", "-L", help="Namespace of the control plane."
    ),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Data plane namespace."),
    proxy: bool = typer.Option(False, "--proxy", help="Ask extensions to check data plane proxies."),
    wait: str | None = typer.Option(None, "--wait", help="Maximum time extensions wait, e.g. 5m0s."),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging on stderr."),
    extension_timeout: float | None = typer.Option(
        None, "--extension-timeout", min=0, help="Seconds before an extension is abandoned (0: none)."
    ),
    extension: list[str] | None = typer.Option(
        None, "--extension", "-e", help="Extension to check even if the cluster does not list it."
    ),
    skip_cluster: bool = typer.Option(
        False, "--skip-cluster", help="Do not read installed extensions from the cluster."
    ),
) -> None:
    """Check the mesh and every installed extension."""
    setup_logging(verbose)
    ctx = build_context()
    config = ctx.config

    fmt = exit_on_error(_parse_output(output, config.check.output), ctx, ErrorCode.USER_ERROR)
    timeout = config.check.extension_timeout if extension_timeout is None else extension_timeout

    flags = extension_check_flags(
        {
            "api-addr": api_addr,
            "context": context,
            "as": impersonate,
            "as-group": impersonate_group or [],
            "kubeconfig": kubeconfig,
            "linkerd-namespace": linkerd_namespace,
            "verbose": verbose,
            "namespace": namespace,
            "proxy": proxy,
            "wait": wait or config.check.wait,
        }
    )
    logger.debug("forwarding %s to extensions", flags)

    label_source = None
    if not skip_cluster:
        options = KubeOptions(
            kubectl=config.cluster.kubectl,
            kubeconfig=kubeconfig,
            context=context,
            impersonate=impersonate,
            impersonate_groups=tuple(impersonate_group or ()),
        )
        label_source = partial(extension_labels, options, config.cluster.extension_label)

    hints = config.check.hint_base_url or hint_base_url(__version__)
    service = CheckService(
        checkers=[KubectlChecker(config.cluster.kubectl)],
        flags=flags,
        timeout=timeout or None,
        hint_base_url=hints,
        label_source=label_source,
    )
    aggregator = Aggregator(make_renderer(fmt, ctx.console, hints))
    success = service.run(aggregator, extension or [])

    print_summary(ctx.console, fmt, success)
    if not success:
        exit_with_code(ErrorCode.CHECK_FAILED)


def _parse_output(value: str | None, default: OutputFormat) -> Result[OutputFormat, UsageError]:
    if value is None:
        return Ok(default)
    try:
        return Ok(OutputFormat(value))
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat)
        return Err(UsageError(f"--output supports {choices}, got {value!r}"))

