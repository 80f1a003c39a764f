"""Entry points used by a host (CLI, editor integration) to start validation runs."""

import logging
from pathlib import Path

from kubepolicy.pipeline import (
    TriggerKind,
    ValidationOrchestrator,
    ValidationRequest,
    ValidationResult,
)

logger = logging.getLogger(__name__)

STRUCTURED_SUFFIXES = (".yaml", ".yml")


def is_structured_document(document_path: Path) -> bool:
    """Only YAML documents are validated on save."""
    return Path(document_path).suffix.lower() in STRUCTURED_SUFFIXES


def build_request(
    document_path: Path,
    workspace_root: Path | None = None,
    trigger: TriggerKind = TriggerKind.MANUAL,
    is_template: bool | None = None,
) -> ValidationRequest:
    """Create a request, defaulting the workspace to the current directory."""
    workspace_root = Path(workspace_root) if workspace_root else Path.cwd()
    return ValidationRequest(
        document_path=Path(document_path).resolve(),
        workspace_root=workspace_root.resolve(),
        is_template=is_template,
        trigger=trigger,
    )


async def on_manual_validate(
    orchestrator: ValidationOrchestrator,
    document_path: Path,
    workspace_root: Path | None = None,
) -> ValidationResult:
    """Run one validation for an explicitly requested document."""
    request = build_request(document_path, workspace_root, TriggerKind.MANUAL)
    return await orchestrator.run(request)


async def on_document_saved(
    orchestrator: ValidationOrchestrator,
    document_path: Path,
    workspace_root: Path | None = None,
) -> ValidationResult | None:
    """Run one validation for a saved document; non-YAML documents are ignored."""
    if not is_structured_document(document_path):
        logger.debug(f"Ignoring save of non-YAML document {document_path}")
        return None
    request = build_request(document_path, workspace_root, TriggerKind.SAVE)
    return await orchestrator.run(request)
