"""Validation pipeline: request/result types, reporting and orchestration."""

from .result import (
    OutcomeKind,
    PipelineStage,
    TriggerKind,
    ValidationRequest,
    ValidationResult,
)
from .reporting import ConsoleReporter, LogReporter, Reporter
from .orchestrator import ValidationOrchestrator

__all__ = [
    "OutcomeKind",
    "PipelineStage",
    "TriggerKind",
    "ValidationRequest",
    "ValidationResult",
    "Reporter",
    "LogReporter",
    "ConsoleReporter",
    "ValidationOrchestrator",
]
