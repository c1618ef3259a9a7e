# SPDX-License-Identifier: MIT
"""JSON wire formats spoken between the check command and extensions.

Two documents cross the process boundary:

- ``<extension> _extension-metadata`` prints an ExtensionMetadata object:
  ``{"name": "linkerd-foo", "checks": "always"}``
- ``<extension> check ... --output=json`` prints a CheckOutput object:
  ``{"success": bool, "categories": [{"categoryName": str, "checks": [...]}]}``
  where every check is ``{"description", "hint"?, "error"?, "result"}``.

Parsing is strict about types: a field that is present with the wrong JSON
type is an error. Absent fields take their zero value.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from meshcheck.core.result import Err, Ok, Result
from meshcheck.core.structured import StrDict, as_obj_list, as_str_dict
from meshcheck.services.checkers.base import CheckResult, CheckStatus

__all__ = [
    "ALWAYS",
    "METADATA_SUBCOMMAND",
    "ExtensionMetadata",
    "WireError",
    "parse_metadata",
    "parse_check_output",
    "check_entry",
]

METADATA_SUBCOMMAND = "_extension-metadata"

ALWAYS = "always"


class WireError(ValueError):
    """Raised internally when a document does not have the expected shape."""


@dataclass(frozen=True, slots=True)
class ExtensionMetadata:
    """Identity an extension reports about itself."""

    name: str
    checks: str

    @property
    def always(self) -> bool:
        return self.checks == ALWAYS


def _decode_object(text: str, what: str) -> StrDict:
    data: object = json.loads(text)
    obj = as_str_dict(data)
    if obj is None:
        raise WireError(f"{what}: expected a JSON object, got {type(data).__name__}")
    return obj


def _field_str(obj: StrDict, key: str, what: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise WireError(f"{what}: field {key!r} must be a string")
    return value


def _field_objects(obj: StrDict, key: str, what: str) -> list[StrDict]:
    value = obj.get(key)
    if value is None:
        return []
    items = as_obj_list(value)
    if items is None:
        raise WireError(f"{what}: field {key!r} must be an array")
    out: list[StrDict] = []
    for item in items:
        entry = as_str_dict(item)
        if entry is None:
            raise WireError(f"{what}: every {key!r} entry must be an object")
        out.append(entry)
    return out


def parse_metadata(text: str) -> Result[ExtensionMetadata, str]:
    """Parse the output of the metadata subcommand."""
    try:
        obj = _decode_object(text, "extension metadata")
        return Ok(
            ExtensionMetadata(
                name=_field_str(obj, "name", "extension metadata"),
                checks=_field_str(obj, "checks", "extension metadata"),
            )
        )
    except ValueError as e:
        return Err(str(e))


def parse_check_output(text: str) -> Result[list[CheckResult], str]:
    """Parse ``check --output=json`` output into flat check results.

    The top-level ``success`` field is informational and ignored: the verdict
    is recomputed from the individual results.
    """
    try:
        doc = _decode_object(text, "check output")
        success = doc.get("success")
        if success is not None and not isinstance(success, bool):
            raise WireError("check output: field 'success' must be a boolean")

        results: list[CheckResult] = []
        for category in _field_objects(doc, "categories", "check output"):
            name = _field_str(category, "categoryName", "check category")
            for check in _field_objects(category, "checks", "check category"):
                error = _field_str(check, "error", "check")
                hint = _field_str(check, "hint", "check")
                results.append(
                    CheckResult(
                        category=name,
                        description=_field_str(check, "description", "check"),
                        err=error or None,
                        warning=_field_str(check, "result", "check") == CheckStatus.WARNING.value,
                        hint_url=hint or None,
                    )
                )
        return Ok(results)
    except ValueError as e:
        return Err(str(e))


def check_entry(result: CheckResult, hint: str | None) -> dict[str, str]:
    """Wire form of a single final result, as emitted in JSON output."""
    entry: dict[str, str] = {"description": result.description}
    if result.err is not None:
        if hint:
            entry["hint"] = hint
        entry["error"] = result.err
    entry["result"] = result.status.value
    return entry
