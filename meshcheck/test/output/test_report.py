"""Tests for meshcheck.output.report module."""

from __future__ import annotations

import io
import json

import pytest

from meshcheck.core.config import OutputFormat
from meshcheck.output.console import MockConsole, RichConsole, Style
from meshcheck.output.report import (
    Aggregator,
    JsonRenderer,
    TableRenderer,
    make_renderer,
    print_summary,
)
from meshcheck.services.checkers.base import CheckResult


def _retrying(category: str, description: str, err: str) -> CheckResult:
    return CheckResult(category=category, description=description, err=err, retry=True)


def _table(console: MockConsole | RichConsole, *, short: bool = False) -> Aggregator:
    return Aggregator(TableRenderer(console, short=short))


class TestTableRenderer:
    def test_groups_by_category(self) -> None:
        out = io.StringIO()
        agg = _table(RichConsole(file=out, force_terminal=False))

        agg(CheckResult.success("kubernetes-api", "can initialize the client"))
        agg(CheckResult.success("kubernetes-api", "can query the Kubernetes API"))
        agg(
            CheckResult(
                category="linkerd-viz",
                description="prometheus is installed and configured correctly",
                err="prometheus not found",
                warning=True,
                hint_anchor="l5d-viz-prometheus",
            )
        )
        assert agg.finish() is True

        assert out.getvalue() == (
            "kubernetes-api\n"
            "--------------\n"
            "√ can initialize the client\n"
            "√ can query the Kubernetes API\n"
            "\n"
            "linkerd-viz\n"
            "-----------\n"
            "‼ prometheus is installed and configured correctly\n"
            "    prometheus not found\n"
            "    see https://linkerd.io/2/checks/#l5d-viz-prometheus for hints\n"
            "\n"
        )

    def test_error_without_hint(self) -> None:
        console = MockConsole()
        agg = _table(console)
        agg(CheckResult.error("cat", "thing works", "it does not"))
        agg.finish()

        assert console.messages == ["cat", "---", "× thing works", "    it does not", ""]
        assert console.count(Style.ERROR) == 1

    def test_multiline_error_kept_verbatim(self) -> None:
        console = MockConsole()
        agg = _table(console)
        agg(CheckResult.error("cat", "desc", "line one\nline two"))
        agg.finish()

        assert "    line one\nline two" in console.messages

    def test_empty_run_ends_with_blank_line(self) -> None:
        console = MockConsole()
        assert _table(console).finish() is True
        assert console.messages == [""]

    def test_category_reappearing_gets_new_header(self) -> None:
        console = MockConsole()
        agg = _table(console)
        agg(CheckResult.success("a", "one"))
        agg(CheckResult.success("b", "two"))
        agg(CheckResult.success("a", "three"))
        agg.finish()

        assert console.messages.count("a") == 2

    def test_section_header(self) -> None:
        console = MockConsole()
        agg = _table(console)
        agg(CheckResult.success("kubectl", "kubectl executable is available"))
        agg.section("Linkerd extensions checks")
        agg(CheckResult.success("linkerd-viz", "viz extension Namespace exists"))
        agg.finish()

        assert console.text == (
            "kubectl\n"
            "-------\n"
            "√ kubectl executable is available\n"
            "\n"
            "\n"
            "Linkerd extensions checks\n"
            "=========================\n"
            "\n"
            "linkerd-viz\n"
            "-----------\n"
            "√ viz extension Namespace exists\n"
            "\n"
        )

    def test_section_first(self) -> None:
        console = MockConsole()
        agg = _table(console)
        agg.section("Linkerd extensions checks")
        agg.finish()

        assert console.messages == ["", "", "Linkerd extensions checks", "=" * 25, ""]


class TestShortOutput:
    def test_hides_successes(self) -> None:
        console = MockConsole()
        agg = _table(console, short=True)
        agg(CheckResult.success("ok-category", "fine"))
        agg(CheckResult.success("mixed", "fine too"))
        agg(CheckResult.warning_result("mixed", "flaky", "sometimes", "https://example.com/w"))
        agg.finish()

        assert console.text == (
            "mixed\n"
            "-----\n"
            "‼ flaky\n"
            "    sometimes\n"
            "    see https://example.com/w for hints\n"
            "\n"
        )

    def test_all_passing_prints_nothing(self) -> None:
        console = MockConsole()
        agg = _table(console, short=True)
        agg(CheckResult.success("a", "fine"))
        assert agg.finish() is True
        assert console.outputs == []

    def test_section_after_passing_block(self) -> None:
        console = MockConsole()
        agg = _table(console, short=True)
        agg(CheckResult.success("kubectl", "fine"))
        agg.section("Linkerd extensions checks")
        agg(CheckResult.error("linkerd-viz", "viz pods running", "down"))
        agg.finish()

        assert console.text == (
            "\n"
            "Linkerd extensions checks\n"
            "=========================\n"
            "\n"
            "linkerd-viz\n"
            "-----------\n"
            "× viz pods running\n"
            "    down\n"
            "\n"
        )


class TestRetry:
    def test_retry_on_terminal_updates_spinner(self) -> None:
        console = MockConsole(terminal=True)
        agg = _table(console)
        agg(_retrying("linkerd-viz", "pods are ready", "waiting for pods"))
        agg(CheckResult.success("linkerd-viz", "pods are ready"))
        assert agg.finish() is True

        assert console.statuses == ["waiting for pods"]
        assert console.spinning is False
        assert console.messages == ["linkerd-viz", "-----------", "√ pods are ready", ""]

    def test_retry_off_terminal_prints_no_result_line(self) -> None:
        console = MockConsole()
        agg = _table(console)
        agg(_retrying("linkerd-viz", "pods are ready", "waiting for pods"))

        assert console.statuses == []
        assert console.find("pods are ready") == []

    def test_retry_errors_do_not_fail_the_run(self) -> None:
        agg = _table(MockConsole())
        agg(_retrying("cat", "desc", "not yet"))
        assert agg.finish() is True


class TestProgress:
    def test_progress_on_terminal(self) -> None:
        console = MockConsole(terminal=True)
        agg = _table(console)
        agg.progress("Running viz extension check")
        assert console.statuses == ["Running viz extension check"]
        assert console.spinning is True

        agg(CheckResult.success("linkerd-viz", "viz"))
        assert console.spinning is False

    def test_progress_off_terminal(self) -> None:
        console = MockConsole()
        _table(console).progress("Running viz extension check")
        assert console.statuses == []


class TestAggregator:
    def test_verdict(self) -> None:
        agg = Aggregator(TableRenderer(MockConsole()))
        agg(CheckResult.success("a", "ok"))
        agg(CheckResult.warning_result("a", "warn", "meh"))
        assert agg.success is True
        assert agg.warning is True

        agg(CheckResult.error("a", "bad", "broken"))
        assert agg.success is False
        assert agg.finish() is False

    def test_warning_stays_false_without_warnings(self) -> None:
        agg = Aggregator(TableRenderer(MockConsole()))
        agg(CheckResult.error("a", "bad", "broken"))
        assert agg.warning is False


class TestJsonRenderer:
    def test_document(self) -> None:
        console = MockConsole()
        agg = Aggregator(JsonRenderer(console))
        agg(CheckResult.success("kubectl", "kubectl executable is available"))
        agg(_retrying("linkerd-viz", "pods are ready", "waiting"))
        agg(CheckResult.error("linkerd-viz", "pods are ready", "timed out", "https://example.com/e"))
        agg(CheckResult(category="linkerd-viz", description="anchor", err="x", hint_anchor="a"))
        agg(CheckResult.warning_result("missing", "command exists", "not found"))
        assert agg.finish() is False

        assert len(console.outputs) == 1
        text = console.outputs[0].message
        assert text.startswith('{\n  "success": false,')
        assert json.loads(text) == {
            "success": False,
            "categories": [
                {
                    "categoryName": "kubectl",
                    "checks": [
                        {"description": "kubectl executable is available", "result": "success"}
                    ],
                },
                {
                    "categoryName": "linkerd-viz",
                    "checks": [
                        {
                            "description": "pods are ready",
                            "hint": "https://example.com/e",
                            "error": "timed out",
                            "result": "error",
                        },
                        {
                            "description": "anchor",
                            "hint": "https://linkerd.io/2/checks/#a",
                            "error": "x",
                            "result": "error",
                        },
                    ],
                },
                {
                    "categoryName": "missing",
                    "checks": [
                        {"description": "command exists", "error": "not found", "result": "warning"}
                    ],
                },
            ],
        }

    def test_key_order(self) -> None:
        console = MockConsole()
        agg = Aggregator(JsonRenderer(console))
        agg(CheckResult.error("c", "d", "e", "h"))
        agg.finish()

        doc = json.loads(console.outputs[0].message)
        assert list(doc) == ["success", "categories"]
        assert list(doc["categories"][0]) == ["categoryName", "checks"]
        assert list(doc["categories"][0]["checks"][0]) == ["description", "hint", "error", "result"]

    def test_empty_run(self) -> None:
        console = MockConsole()
        assert Aggregator(JsonRenderer(console)).finish() is True
        assert json.loads(console.outputs[0].message) == {"success": True, "categories": []}

    def test_progress_and_sections_are_silent(self) -> None:
        console = MockConsole(terminal=True)
        agg = Aggregator(JsonRenderer(console))
        agg.progress("Running viz extension check")
        agg.section("Linkerd extensions checks")
        assert console.outputs == []
        assert console.statuses == []

    def test_serialization_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import meshcheck.output.report as report

        def boom(*_: object, **__: object) -> str:
            raise TypeError("unsupported type")

        monkeypatch.setattr(report.json, "dumps", boom)
        console = MockConsole()
        agg = Aggregator(JsonRenderer(console))
        agg(CheckResult.success("a", "ok"))

        assert agg.finish() is False
        assert console.errors == [
            "JSON serialization of the check result failed with unsupported type"
        ]
        assert console.outputs == []


class TestMakeRenderer:
    def test_formats(self) -> None:
        console = MockConsole()
        assert isinstance(make_renderer(OutputFormat.JSON, console), JsonRenderer)

        table = make_renderer(OutputFormat.TABLE, console)
        assert isinstance(table, TableRenderer)
        assert table.short is False

        short = make_renderer(OutputFormat.SHORT, console, "https://example.com/#")
        assert isinstance(short, TableRenderer)
        assert short.short is True
        assert short.hint_base_url == "https://example.com/#"


class TestPrintSummary:
    def test_success(self) -> None:
        console = MockConsole()
        print_summary(console, OutputFormat.TABLE, True)
        assert console.outputs[0].message == "Status check results are √"
        assert console.outputs[0].style == Style.SUCCESS

    def test_failure(self) -> None:
        console = MockConsole()
        print_summary(console, OutputFormat.SHORT, False)
        assert console.outputs[0].message == "Status check results are ×"
        assert console.outputs[0].style == Style.ERROR

    def test_json_has_no_summary(self) -> None:
        console = MockConsole()
        print_summary(console, OutputFormat.JSON, True)
        assert console.outputs == []
