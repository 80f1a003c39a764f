"""Models for the declarative rule set document (policies/rules.yaml)."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class OperatorKind(str, Enum):
    """Condition operators the policy compiler knows how to translate."""
    EQUALS = "equals"
    EXISTS = "exists"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    REGEX_MATCH = "regex_match"

    @classmethod
    def parse(cls, operator: str) -> "OperatorKind | None":
        """Return the matching kind, or None for an unrecognized operator string."""
        try:
            return cls(operator)
        except ValueError:
            return None


class MatchSpec(BaseModel):
    """Selects which documents a rule applies to."""
    kind: str

    model_config = ConfigDict(frozen=True)


class Condition(BaseModel):
    """A single guard evaluated against the input document."""
    path: str
    operator: str
    value: Any = None
    value_from: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def operator_kind(self) -> OperatorKind | None:
        return OperatorKind.parse(self.operator)


class Rule(BaseModel):
    """One declarative rule; compiles to one denial clause."""
    name: str
    match: MatchSpec
    conditions: tuple[Condition, ...] = ()
    message: str

    model_config = ConfigDict(frozen=True)

    @property
    def match_kind(self) -> str:
        return self.match.kind


class RuleSet(BaseModel):
    """Ordered, immutable collection of rules loaded from one document."""
    rules: tuple[Rule, ...]

    model_config = ConfigDict(frozen=True)

    @property
    def unknown_operators(self) -> list[tuple[str, str]]:
        """(rule name, operator) pairs whose operator is not a known OperatorKind."""
        return [
            (rule.name, condition.operator)
            for rule in self.rules
            for condition in rule.conditions
            if condition.operator_kind is None
        ]
