# SPDX-License-Identifier: MIT
"""Installed-extension lookup.

Extensions mark their namespace with a label (``linkerd.io/extension=viz``).
The set of label values is what the cluster reports as installed; it is read
through kubectl so no Kubernetes client library is needed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from meshcheck.core.config import DEFAULT_EXTENSION_LABEL, DEFAULT_KUBECTL
from meshcheck.core.result import Err, Ok, Result
from meshcheck.core.structured import as_str_dict, get_list, get_table
from meshcheck.platform.process import run

__all__ = ["ClusterError", "KubeOptions", "extension_labels", "parse_namespace_labels"]


@dataclass(frozen=True, slots=True)
class ClusterError:
    """The cluster could not be asked which extensions are installed."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class KubeOptions:
    """Connection flags passed through to kubectl."""

    kubectl: str = DEFAULT_KUBECTL
    kubeconfig: str | None = None
    context: str | None = None
    impersonate: str | None = None
    impersonate_groups: tuple[str, ...] = ()

    def args(self) -> list[str]:
        args: list[str] = []
        if self.kubeconfig:
            args.append(f"--kubeconfig={self.kubeconfig}")
        if self.context:
            args.append(f"--context={self.context}")
        if self.impersonate:
            args.append(f"--as={self.impersonate}")
        for group in self.impersonate_groups:
            args.append(f"--as-group={group}")
        return args


def parse_namespace_labels(text: str, label: str = DEFAULT_EXTENSION_LABEL) -> list[str]:
    """Extract label values from ``kubectl get namespaces -o json`` output.

    Values are de-duplicated, keeping first-seen order.

    Raises:
        ValueError: If the output is not a namespace list.
    """
    doc = as_str_dict(json.loads(text))
    if doc is None:
        raise ValueError("expected a JSON object")
    items = get_list(doc, "items")
    if items is None:
        raise ValueError("expected an 'items' list")

    values: list[str] = []
    for item in items:
        namespace = as_str_dict(item) or {}
        metadata = get_table(namespace, "metadata") or {}
        labels = get_table(metadata, "labels") or {}
        value = labels.get(label)
        if isinstance(value, str) and value and value not in values:
            values.append(value)
    return values


def extension_labels(
    options: KubeOptions,
    label: str = DEFAULT_EXTENSION_LABEL,
    *,
    timeout: float | None = 60,
) -> Result[list[str], ClusterError]:
    """Names of the extensions installed on the cluster."""
    cmd = [options.kubectl, *options.args(), "get", "namespaces", "-l", label, "-o", "json"]
    match run(cmd, timeout=timeout):
        case Err(error):
            return Err(
                ClusterError(
                    error.message,
                    hint="check your kubeconfig or pass --skip-cluster",
                )
            )
        case Ok(stdout):
            try:
                return Ok(parse_namespace_labels(stdout, label))
            except ValueError as e:
                return Err(ClusterError(f"unexpected kubectl output: {e}"))
