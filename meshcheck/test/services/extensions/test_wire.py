# SPDX-License-Identifier: MIT
"""Tests for the extension wire formats."""

from __future__ import annotations

import pytest

from meshcheck.core.result import Err, Ok
from meshcheck.services.checkers.base import CheckResult, CheckStatus
from meshcheck.services.extensions.wire import (
    ExtensionMetadata,
    check_entry,
    parse_check_output,
    parse_metadata,
)


class TestParseMetadata:
    def test_valid(self) -> None:
        result = parse_metadata('{"name": "linkerd-foo", "checks": "always"}')
        assert result == Ok(ExtensionMetadata(name="linkerd-foo", checks="always"))
        assert result.unwrap().always is True

    def test_extra_fields_ignored(self) -> None:
        result = parse_metadata('{"name": "linkerd-foo", "checks": "always", "version": 2}')
        assert result.unwrap().name == "linkerd-foo"

    def test_absent_fields_are_empty(self) -> None:
        metadata = parse_metadata("{}").unwrap()
        assert metadata == ExtensionMetadata(name="", checks="")
        assert metadata.always is False

    @pytest.mark.parametrize(
        "text",
        ["", "bad json", "[]", '"linkerd-foo"', '{"name": 1}', '{"checks": true}'],
    )
    def test_invalid(self, text: str) -> None:
        assert isinstance(parse_metadata(text), Err)


class TestParseCheckOutput:
    def test_flattens_categories(self) -> None:
        text = """
        {
            "success": false,
            "categories": [
                {
                    "categoryName": "linkerd-viz",
                    "checks": [
                        {"description": "viz Namespace exists", "result": "success"},
                        {
                            "description": "prometheus is running",
                            "hint": "https://example.com/prom",
                            "error": "prometheus not found",
                            "result": "warning"
                        }
                    ]
                },
                {
                    "categoryName": "linkerd-viz-data-plane",
                    "checks": [
                        {"description": "proxies are up", "error": "1 down", "result": "error"}
                    ]
                }
            ]
        }
        """

        results = parse_check_output(text).unwrap()

        assert results == [
            CheckResult(category="linkerd-viz", description="viz Namespace exists"),
            CheckResult(
                category="linkerd-viz",
                description="prometheus is running",
                err="prometheus not found",
                warning=True,
                hint_url="https://example.com/prom",
            ),
            CheckResult(
                category="linkerd-viz-data-plane", description="proxies are up", err="1 down"
            ),
        ]
        assert [r.status for r in results] == [
            CheckStatus.OK,
            CheckStatus.WARNING,
            CheckStatus.ERROR,
        ]

    def test_success_flag_is_not_trusted(self) -> None:
        text = (
            '{"success": true, "categories": [{"categoryName": "c", '
            '"checks": [{"description": "d", "error": "boom", "result": "error"}]}]}'
        )
        [result] = parse_check_output(text).unwrap()
        assert result.is_error

    def test_empty_object(self) -> None:
        assert parse_check_output("{}") == Ok([])

    def test_null_categories(self) -> None:
        assert parse_check_output('{"success": true, "categories": null}') == Ok([])

    def test_bad_json_error_message(self) -> None:
        assert parse_check_output("bad json") == Err("Expecting value: line 1 column 1 (char 0)")

    @pytest.mark.parametrize(
        "text",
        [
            "[]",
            '{"success": "yes"}',
            '{"categories": {}}',
            '{"categories": [1]}',
            '{"categories": [{"categoryName": 3}]}',
            '{"categories": [{"categoryName": "c", "checks": [{"description": ["d"]}]}]}',
            '{"categories": [{"categoryName": "c", "checks": [{"error": false}]}]}',
        ],
    )
    def test_wrong_types(self, text: str) -> None:
        assert isinstance(parse_check_output(text), Err)


class TestCheckEntry:
    def test_success_has_no_hint_or_error(self) -> None:
        entry = check_entry(CheckResult.success("c", "d"), "https://example.com")
        assert entry == {"description": "d", "result": "success"}

    def test_failure_key_order(self) -> None:
        entry = check_entry(CheckResult.error("c", "d", "boom"), "https://example.com/h")
        assert list(entry.items()) == [
            ("description", "d"),
            ("hint", "https://example.com/h"),
            ("error", "boom"),
            ("result", "error"),
        ]

    def test_failure_without_hint(self) -> None:
        entry = check_entry(CheckResult.warning_result("c", "d", "meh"), None)
        assert entry == {"description": "d", "error": "meh", "result": "warning"}
