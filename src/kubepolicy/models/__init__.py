"""Pydantic data models for kubepolicy rule sets."""

from kubepolicy.models.rules import Condition, MatchSpec, OperatorKind, Rule, RuleSet

__all__ = [
    "RuleSet",
    "Rule",
    "MatchSpec",
    "Condition",
    "OperatorKind",
]
