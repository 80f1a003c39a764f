"""Tests for validation result values and reporters."""

import json
from pathlib import Path

import pytest
from rich.console import Console

from kubepolicy.errors import ErrorKind
from kubepolicy.pipeline import (
    ConsoleReporter,
    OutcomeKind,
    PipelineStage,
    ValidationResult,
)


class TestValidationResult:
    """Outcome construction and serialization."""

    def test_no_violations(self):
        result = ValidationResult.no_violations(document_path=Path("pod.yaml"))
        assert result.outcome == OutcomeKind.NO_VIOLATIONS
        assert result.message == "No policy violations found."
        assert result.reasons == []
        assert result.exit_code == 0

    def test_violations(self):
        result = ValidationResult.violations('["a", "b"]')
        assert result.reasons == ["a", "b"]
        assert result.exit_code == 1

    def test_failure(self):
        result = ValidationResult.failure(ErrorKind.IO_ERROR, "Rule file 'rules.yaml' not found", stage=PipelineStage.COMPILE)
        assert result.outcome == OutcomeKind.FAILURE
        assert result.exit_code == 2
        assert result.reasons == []

    def test_to_dict(self):
        result = ValidationResult.failure(
            ErrorKind.RENDER_ERROR, "helm template failed",
            stage=PipelineStage.RENDER, document_path=Path("chart/deploy.yaml"),
            warnings=["w"],
        )
        data = result.to_dict()
        assert data["outcome"] == "failure"
        assert data["error_kind"] == "render_error"
        assert data["stage"] == "render"
        assert data["document"] == str(Path("chart/deploy.yaml"))
        assert data["evaluated"] is None
        assert data["warnings"] == ["w"]
        json.dumps(data)


def record(format: str) -> tuple[ConsoleReporter, Console]:
    console = Console(record=True, width=120)
    return ConsoleReporter(console=console, format=format), console


class TestConsoleReporter:
    """Rendering results on a console."""

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid format"):
            ConsoleReporter(format="xml")

    def test_table_violations(self):
        reporter, console = record("table")
        reporter.report(ValidationResult.violations('["root containers forbidden"]', document_path=Path("pod.yaml")))
        assert "root containers forbidden" in console.export_text()

    def test_table_failure(self):
        reporter, console = record("table")
        reporter.report(ValidationResult.failure(ErrorKind.PARSE_ERROR, "Failed to parse 'rules.yaml'"))
        text = console.export_text()
        assert "Failed to parse 'rules.yaml'" in text
        assert "parse_error" in text

    def test_json(self):
        reporter, console = record("json")
        reporter.report(ValidationResult.no_violations())
        assert json.loads(console.export_text())["outcome"] == "no_violations"

    def test_markdown_includes_warnings(self):
        reporter, console = record("markdown")
        reporter.report(ValidationResult.no_violations(warnings=["helm missing"]))
        text = console.export_text()
        assert "# Validation Report" in text
        assert "- helm missing" in text

    def test_warning_printed_in_table_mode(self):
        reporter, console = record("table")
        reporter.warning("Template renderer 'helm' is not installed")
        assert "Template renderer 'helm' is not installed" in console.export_text()

    def test_quiet_suppresses_info(self):
        console = Console(record=True)
        ConsoleReporter(console=console, quiet=True).info("Rego file generated")
        assert console.export_text() == ""
