"""Shared fixtures for kubepolicy tests."""

from pathlib import Path

import pytest

from kubepolicy.adapters.helm import TemplateRenderer
from kubepolicy.errors import EvaluationError, RenderError
from kubepolicy.pipeline.reporting import Reporter

RULES_YAML = """\
rules:
  - name: no-root
    match:
      kind: Pod
    conditions:
      - path: spec.containers[*].securityContext.runAsRoot
        operator: equals
        value: true
    message: root containers forbidden
  - name: owner-label
    match:
      kind: Deployment
    conditions:
      - path: metadata.labels.owner
        operator: exists
    message: deployments need an owner label
"""

POD_YAML = """\
apiVersion: v1
kind: Pod
metadata:
  name: web
spec:
  containers:
    - name: web
      image: nginx:1.25
      securityContext:
        runAsRoot: true
"""

TEMPLATE_YAML = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: {{ include "chart.fullname" . }}
data:
  scanner: {{ .Values.config.dependencyScanner }}
  database: {{ .Values.config.vulnerabilityDatabase }}
  replicas: "{{ .Values.replicaCount }}"
"""


class RecordingReporter(Reporter):
    """Reporter that keeps every notification for assertions."""

    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.results = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def report(self, result) -> None:
        self.results.append(result)


class FakeRenderer(TemplateRenderer):
    """Renderer double writing a fixed manifest next to the template."""

    def __init__(self, available: bool = True, output: str = POD_YAML, error: str | None = None):
        self.available = available
        self.output = output
        self.error = error
        self.availability_checks = 0
        self.rendered: list[Path] = []

    @property
    def name(self) -> str:
        return "fake-helm"

    async def is_available(self) -> bool:
        self.availability_checks += 1
        return self.available

    async def render(self, document_path: Path) -> Path:
        self.rendered.append(Path(document_path))
        if self.error:
            raise RenderError("fake-helm template failed", self.error)
        out_dir = Path(document_path).parent / "rendered-output"
        out_dir.mkdir(exist_ok=True)
        rendered = out_dir / "kube.yaml"
        rendered.write_text(self.output, encoding="utf-8")
        return rendered


class FakeEvaluator:
    """Evaluator double returning canned output."""

    def __init__(self, output: str = "", error: str | None = None):
        self.output = output
        self.error = error
        self.calls: list[tuple[Path, Path]] = []

    async def evaluate(self, document_path: Path, policy_path: Path) -> str:
        self.calls.append((Path(document_path), Path(policy_path)))
        if self.error:
            raise EvaluationError("opa eval failed", self.error)
        return self.output


@pytest.fixture
def workspace(tmp_path):
    """Workspace with a policies/rules.yaml and a plain Pod manifest."""
    policies = tmp_path / "policies"
    policies.mkdir()
    (policies / "rules.yaml").write_text(RULES_YAML, encoding="utf-8")
    (tmp_path / "pod.yaml").write_text(POD_YAML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def template_document(workspace):
    """Helm template inside the workspace."""
    chart = workspace / "chart"
    chart.mkdir()
    document = chart / "configmap.yaml"
    document.write_text(TEMPLATE_YAML, encoding="utf-8")
    return document


@pytest.fixture
def reporter():
    return RecordingReporter()

