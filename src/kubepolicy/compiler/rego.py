"""Rule set to Rego policy compiler.

Each rule becomes one ``deny`` clause: a match guard on the document kind,
one guard line per condition in input order, and a reason binding carrying
the rule message. Output order always equals input order.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kubepolicy.config import PoliciesConfig, RegoSyntax
from kubepolicy.errors import PolicyIOError, SchemaError
from kubepolicy.models.rules import Condition, OperatorKind, Rule, RuleSet

logger = logging.getLogger(__name__)

WILDCARD_SEGMENT = "[*]"
REGO_ANY_ELEMENT = "[_]"
INPUT_PREFIX = "input."
INDENT = "  "

BINARY_OPERATORS = {
    OperatorKind.EQUALS: "==",
    OperatorKind.GREATER_THAN: ">",
    OperatorKind.LESS_THAN: "<",
}


def rewrite_wildcards(path: str) -> str:
    """Replace every wildcard segment with Rego's any-element marker.

    >>> rewrite_wildcards("spec.containers[*].image")
    'spec.containers[_].image'
    """
    return path.replace(WILDCARD_SEGMENT, REGO_ANY_ELEMENT)


def input_ref(path: str) -> str:
    """Reference to a document path rooted at ``input``."""
    path = rewrite_wildcards(path)
    if path.startswith(INPUT_PREFIX):
        return path
    return INPUT_PREFIX + path


def rego_literal(value: Any) -> str:
    """Encode a scalar or structured value as a Rego literal."""
    return json.dumps(value, ensure_ascii=False)


@dataclass(frozen=True)
class CompiledPolicy:
    """Generated Rego source for one rule set."""
    package: str
    source: str
    rule_count: int

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.source.encode("utf-8")).hexdigest()

    def __str__(self) -> str:
        return self.source


class PolicyCompiler:
    """Compiles a RuleSet into Rego source text."""

    def __init__(self, config: PoliciesConfig | None = None):
        self.config = config or PoliciesConfig()

    @property
    def _syntax(self) -> RegoSyntax:
        return RegoSyntax(self.config.rego_syntax)

    def compile(self, rule_set: RuleSet) -> CompiledPolicy:
        """Compile every rule into a denial clause.

        Raises:
            SchemaError: In strict mode, if any condition uses an unknown operator
        """
        if self.config.strict_operators:
            unknown = rule_set.unknown_operators
            if unknown:
                listing = ", ".join(f"{name}: '{op}'" for name, op in unknown)
                supported = ", ".join(kind.value for kind in OperatorKind)
                raise SchemaError(
                    f"Unsupported operator(s) in rule set ({listing})",
                    f"supported operators: {supported}",
                )

        parts = [self._header()]
        parts.extend(self.compile_rule(rule) for rule in rule_set.rules)
        source = "\n\n".join(parts) + "\n"

        policy = CompiledPolicy(package=self.config.package, source=source, rule_count=len(rule_set.rules))
        logger.info(f"Compiled {policy.rule_count} rules into package {policy.package}")
        return policy

    def compile_rule(self, rule: Rule) -> str:
        """Compile a single rule into its clause block."""
        lines = [self._clause_open()]
        lines.append(f"{INDENT}input.kind == {rego_literal(rule.match_kind)}")
        for condition in rule.conditions:
            lines.append(INDENT + self.compile_condition(condition))
        lines.append(f"{INDENT}reason := {rego_literal(rule.message)}")
        lines.append("}")
        return "\n".join(lines)

    def compile_condition(self, condition: Condition) -> str:
        """Translate one condition into a guard line (without indentation)."""
        field_ref = input_ref(condition.path)
        kind = condition.operator_kind

        if kind == OperatorKind.EXISTS:
            return f"{field_ref} != null"

        rhs = self._right_hand_side(condition)

        if kind == OperatorKind.REGEX_MATCH:
            return f"regex.match({rhs}, {field_ref})"
        if kind in BINARY_OPERATORS:
            return f"{field_ref} {BINARY_OPERATORS[kind]} {rhs}"

        # Unknown operators only reach here when strict mode is off
        logger.warning(f"Passing unrecognized operator '{condition.operator}' through verbatim")
        return f"{field_ref} {condition.operator} {rhs}"

    def _right_hand_side(self, condition: Condition) -> str:
        if condition.value_from:
            return input_ref(condition.value_from)
        return rego_literal(condition.value)

    def _header(self) -> str:
        header = f"package {self.config.package}"
        if self._syntax == RegoSyntax.V1:
            header += "\n\nimport rego.v1"
        return header

    def _clause_open(self) -> str:
        if self._syntax == RegoSyntax.V1:
            return "deny contains reason if {"
        return "deny[reason] {"


class PolicyWriter:
    """Writes compiled policies to disk, overwriting any previous file."""

    @staticmethod
    def write(policy: CompiledPolicy, policy_path: Path) -> Path:
        """Write policy source to ``policy_path``.

        Raises:
            PolicyIOError: If the directory or file cannot be written
        """
        policy_path = Path(policy_path)
        try:
            policy_path.parent.mkdir(parents=True, exist_ok=True)
            policy_path.write_text(policy.source, encoding="utf-8")
        except OSError as e:
            raise PolicyIOError(
                f"Failed to write '{policy_path.name}'. Check folder permissions", str(e)
            )

        logger.info(f"Generated rego file at: {policy_path} (sha256 {policy.digest[:16]})")
        logger.debug(f"Rego file content:\n{policy.source}")
        return policy_path
