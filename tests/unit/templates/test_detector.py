"""Tests for Helm template detection."""

import pytest

from kubepolicy.errors import PolicyIOError
from kubepolicy.templates.detector import detect_template, detect_template_file


class TestDetectTemplate:
    """Substring scan for templating markers."""

    @pytest.mark.parametrize(
        "text",
        [
            "name: {{ .Release.Name }}",
            "name: value }}",
            "image: {{",
            "replicas: .Values.replicaCount",
            'labels: include "chart.labels"',
        ],
    )
    def test_markers_detected(self, text):
        assert detect_template(text) is True

    def test_plain_manifest(self):
        assert detect_template("apiVersion: v1\nkind: Pod\nmetadata:\n  name: web\n") is False

    def test_marker_inside_string_literal_counts(self):
        assert detect_template('annotations:\n  note: "use {{ braces }} carefully"\n') is True

    def test_include_requires_trailing_space(self):
        assert detect_template("includes: []\n") is False


class TestDetectTemplateFile:
    """Reading documents before scanning."""

    def test_template_file(self, template_document):
        assert detect_template_file(template_document) is True

    def test_plain_file(self, workspace):
        assert detect_template_file(workspace / "pod.yaml") is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(PolicyIOError):
            detect_template_file(tmp_path / "missing.yaml")

    def test_non_utf8_file(self, tmp_path):
        document = tmp_path / "latin1.yaml"
        document.write_bytes(b"name: caf\xe9\n")
        with pytest.raises(PolicyIOError) as exc_info:
            detect_template_file(document)
        assert "Failed to read" in str(exc_info.value)
