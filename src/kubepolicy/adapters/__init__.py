"""Adapters for the external template renderer and policy evaluator."""

from .helm import HelmRenderer, TemplateRenderer, UnavailableRenderer, create_renderer
from .opa import OpaEvaluator, extract_reasons, is_empty_result
from .process import CommandResult, CommandTimeout, run_command

__all__ = [
    "TemplateRenderer",
    "HelmRenderer",
    "UnavailableRenderer",
    "create_renderer",
    "OpaEvaluator",
    "extract_reasons",
    "is_empty_result",
    "CommandResult",
    "CommandTimeout",
    "run_command",
]
