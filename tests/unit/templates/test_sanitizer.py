"""Tests for fallback template sanitization."""

import pytest
import yaml

from kubepolicy.config import SanitizerConfig
from kubepolicy.errors import PolicyIOError, SchemaError
from kubepolicy.templates.sanitizer import TemplateSanitizer, validate_structure


@pytest.fixture
def sanitizer():
    return TemplateSanitizer()


class TestSanitize:
    """Ordered substitution passes."""

    def test_dependency_scanner_placeholder(self, sanitizer):
        sanitized = sanitizer.sanitize("scanner: {{ .Values.config.dependencyScanner }}\n")
        assert sanitized == "scanner: default-dependency-scanner\n"
        assert yaml.safe_load(sanitized) == {"scanner": "default-dependency-scanner"}

    def test_vulnerability_database_placeholder(self, sanitizer):
        assert sanitizer.sanitize("db: {{.Values.config.vulnerabilityDatabase}}") == "db: default-vulnerability-database"

    def test_include_placeholder(self, sanitizer):
        assert sanitizer.sanitize('name: {{ include "chart.fullname" . }}') == "name: default-name"

    def test_remaining_expressions_removed(self, sanitizer):
        assert sanitizer.sanitize("replicas: {{ .Values.replicaCount }}") == "replicas: "

    def test_specific_passes_run_before_catch_all(self, sanitizer):
        text = "a: {{ .Values.config.dependencyScanner }} {{ .Chart.Name }}"
        assert sanitizer.sanitize(text) == "a: default-dependency-scanner "

    def test_expressions_do_not_span_lines(self, sanitizer):
        text = "a: {{ .Values.x\nb: }}"
        assert sanitizer.sanitize(text) == text

    def test_custom_placeholders(self):
        config = SanitizerConfig(
            value_placeholders={"image.tag": "latest"},
            include_placeholder="release",
        )
        sanitizer = TemplateSanitizer(config)
        assert sanitizer.sanitize('tag: {{ .Values.image.tag }}\nname: {{ include "n" . }}') == "tag: latest\nname: release"

    def test_placeholder_with_backslash_is_literal(self):
        sanitizer = TemplateSanitizer(SanitizerConfig(value_placeholders={"path": "C:\\data\\1"}))
        assert sanitizer.sanitize("p: {{ .Values.path }}") == "p: C:\\data\\1"

    def test_round_trip_template_parses(self, sanitizer, template_document):
        sanitized = sanitizer.sanitize(template_document.read_text(encoding="utf-8"))
        data = validate_structure(sanitized)
        assert data["metadata"]["name"] == "default-name"
        assert data["data"]["scanner"] == "default-dependency-scanner"
        assert data["data"]["database"] == "default-vulnerability-database"


class TestSanitizeFile:
    """Writing the sibling sanitized document."""

    def test_writes_sibling_file(self, sanitizer, template_document):
        sanitized_path = sanitizer.sanitize_file(template_document)

        assert sanitized_path == template_document.parent / "sanitized.yaml"
        content = sanitized_path.read_text(encoding="utf-8")
        assert "{{" not in content
        assert "default-dependency-scanner" in content
        # the template itself is untouched
        assert "{{" in template_document.read_text(encoding="utf-8")

    def test_non_utf8_template(self, sanitizer, tmp_path):
        document = tmp_path / "latin1.yaml"
        document.write_bytes(b"name: {{ .Values.caf\xe9 }}\n")
        with pytest.raises(PolicyIOError, match="Failed to read template"):
            sanitizer.sanitize_file(document)
        assert not (tmp_path / "sanitized.yaml").exists()


class TestValidateStructure:
    """Structural re-validation after sanitization."""

    def test_mapping_accepted(self):
        assert validate_structure("kind: Pod\n") == {"kind": "Pod"}

    def test_multi_document_stream(self):
        assert validate_structure("---\nkind: Service\n---\nkind: Deployment\n") == {"kind": "Service"}

    @pytest.mark.parametrize("text", ["", "just-a-scalar", "---\n"])
    def test_scalar_or_empty_rejected(self, text):
        with pytest.raises(SchemaError, match="Invalid YAML structure after sanitization"):
            validate_structure(text)

    def test_unparseable_rejected(self):
        with pytest.raises(SchemaError, match="Error parsing sanitized YAML"):
            validate_structure("key: [unclosed\n")
