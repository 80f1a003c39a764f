"""Request and result types for one validation run."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from kubepolicy.adapters.opa import extract_reasons
from kubepolicy.errors import ErrorKind


class TriggerKind(str, Enum):
    """What started a validation run."""
    MANUAL = "manual"
    SAVE = "save"


class PipelineStage(str, Enum):
    """States of the validation pipeline."""
    START = "start"
    DETECT_TEMPLATE = "detect_template"
    RENDER = "render"
    SANITIZE_FALLBACK = "sanitize_fallback"
    COMPILE = "compile"
    EVALUATE = "evaluate"
    REPORT = "report"


class OutcomeKind(str, Enum):
    """Terminal outcome of a run."""
    NO_VIOLATIONS = "no_violations"
    VIOLATIONS = "violations"
    FAILURE = "failure"


@dataclass(frozen=True)
class ValidationRequest:
    """One validation of a single document.

    ``is_template`` of None means the pipeline detects templating itself.
    """
    document_path: Path
    workspace_root: Path
    is_template: bool | None = None
    trigger: TriggerKind = TriggerKind.MANUAL


@dataclass
class ValidationResult:
    """Outcome of one validation run."""
    outcome: OutcomeKind
    output: str = ""
    error_kind: ErrorKind | None = None
    message: str = ""
    stage: PipelineStage = PipelineStage.REPORT
    document_path: Path | None = None
    evaluated_path: Path | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def no_violations(cls, **kwargs) -> "ValidationResult":
        return cls(OutcomeKind.NO_VIOLATIONS, message="No policy violations found.", **kwargs)

    @classmethod
    def violations(cls, output: str, **kwargs) -> "ValidationResult":
        return cls(OutcomeKind.VIOLATIONS, output=output, **kwargs)

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str, **kwargs) -> "ValidationResult":
        return cls(OutcomeKind.FAILURE, error_kind=error_kind, message=message, **kwargs)

    @property
    def reasons(self) -> list[str]:
        if self.outcome != OutcomeKind.VIOLATIONS:
            return []
        return extract_reasons(self.output)

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = clean, 1 = violations, 2 = failure."""
        if self.outcome == OutcomeKind.NO_VIOLATIONS:
            return 0
        if self.outcome == OutcomeKind.VIOLATIONS:
            return 1
        return 2

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "outcome": self.outcome.value,
            "exit_code": self.exit_code,
            "stage": self.stage.value,
            "document": str(self.document_path) if self.document_path else None,
            "evaluated": str(self.evaluated_path) if self.evaluated_path else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
            "output": self.output,
            "reasons": self.reasons,
            "warnings": self.warnings,
        }
