"""Error taxonomy for kubepolicy validation runs.

Every failure raised inside the pipeline is a ``KubePolicyError`` subclass
carrying an ``ErrorKind``. The orchestrator turns these into failure results;
nothing is retried.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to the invoking collaborator."""
    PARSE_ERROR = "parse_error"
    SCHEMA_ERROR = "schema_error"
    IO_ERROR = "io_error"
    RENDER_ERROR = "render_error"
    EVALUATION_ERROR = "evaluation_error"
    UNKNOWN_ERROR = "unknown_error"


class KubePolicyError(Exception):
    """Base class for all pipeline failures."""

    kind: ErrorKind = ErrorKind.UNKNOWN_ERROR

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ParseError(KubePolicyError):
    """Rule document is not well-formed structured data."""
    kind = ErrorKind.PARSE_ERROR


class SchemaError(KubePolicyError):
    """Document is well-formed but structurally invalid."""
    kind = ErrorKind.SCHEMA_ERROR


class PolicyIOError(KubePolicyError):
    """File read or write failure."""
    kind = ErrorKind.IO_ERROR


class RuleSetNotFoundError(PolicyIOError):
    """Rule set document is absent at the expected location."""


class RenderError(KubePolicyError):
    """External template renderer failed."""
    kind = ErrorKind.RENDER_ERROR


class EvaluationError(KubePolicyError):
    """External policy evaluator failed."""
    kind = ErrorKind.EVALUATION_ERROR
