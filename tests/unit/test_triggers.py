"""Tests for manual and on-save validation triggers."""

from pathlib import Path

import pytest
from conftest import FakeEvaluator, FakeRenderer, RecordingReporter

from kubepolicy.config import KubePolicyConfig
from kubepolicy.pipeline import OutcomeKind, TriggerKind, ValidationOrchestrator
from kubepolicy.triggers import build_request, is_structured_document, on_document_saved, on_manual_validate


@pytest.fixture
def orchestrator():
    return ValidationOrchestrator(
        KubePolicyConfig(),
        renderer=FakeRenderer(),
        evaluator=FakeEvaluator(output='["root containers forbidden"]'),
        reporter=RecordingReporter(),
    )


class TestBuildRequest:
    """Request construction."""

    @pytest.mark.parametrize("name,expected", [
        ("pod.yaml", True),
        ("pod.YML", True),
        ("values.json", False),
        ("README.md", False),
    ])
    def test_structured_documents(self, name, expected):
        assert is_structured_document(Path(name)) is expected

    def test_paths_resolved(self, workspace):
        request = build_request(workspace / "pod.yaml", workspace, TriggerKind.SAVE)
        assert request.document_path.is_absolute()
        assert request.workspace_root == workspace.resolve()
        assert request.trigger == TriggerKind.SAVE
        assert request.is_template is None

    def test_workspace_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert build_request(Path("pod.yaml")).workspace_root == tmp_path.resolve()


class TestTriggers:
    """Trigger handlers."""

    @pytest.mark.asyncio
    async def test_manual(self, orchestrator, workspace):
        result = await on_manual_validate(orchestrator, workspace / "pod.yaml", workspace)
        assert result.outcome == OutcomeKind.VIOLATIONS
        assert orchestrator.reporter.results == [result]

    @pytest.mark.asyncio
    async def test_save_of_yaml_document(self, orchestrator, workspace):
        result = await on_document_saved(orchestrator, workspace / "pod.yaml", workspace)
        assert result.outcome == OutcomeKind.VIOLATIONS

    @pytest.mark.asyncio
    async def test_save_of_other_document_ignored(self, orchestrator, workspace):
        notes = workspace / "notes.txt"
        notes.write_text("hello", encoding="utf-8")

        assert await on_document_saved(orchestrator, notes, workspace) is None
        assert orchestrator.evaluator.calls == []
        assert orchestrator.reporter.results == []
