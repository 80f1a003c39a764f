"""Policy evaluator adapter backed by the opa CLI."""

import json
import logging
from pathlib import Path

from kubepolicy.config import EvaluatorConfig, EvaluatorFormat, RegoSyntax
from kubepolicy.errors import EvaluationError

from .process import CommandTimeout, run_command

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "data.kubernetes.security.deny"


def is_empty_result(output: str) -> bool:
    """True if evaluator output carries no denial.

    Handles blank output, empty JSON values as printed by ``--format raw``
    and ``--format pretty``, and ``--format json`` documents whose
    expression values are all empty.
    """
    output = output.strip()
    if not output:
        return True

    try:
        data = json.loads(output)
    except ValueError:
        return False

    if data in (None, [], {}):
        return True

    if isinstance(data, dict) and set(data) <= {"result", "metrics", "profile", "explanation"}:
        results = data.get("result") or []
        return all(
            not expression.get("value")
            for result in results
            for expression in result.get("expressions", [])
        )

    return False


def extract_reasons(output: str) -> list[str]:
    """Best-effort list of denial reasons from evaluator output."""
    try:
        data = json.loads(output)
    except ValueError:
        return [line for line in output.splitlines() if line.strip()]

    if isinstance(data, dict):
        values = [
            expression.get("value")
            for result in data.get("result") or []
            for expression in result.get("expressions", [])
        ]
        data = [item for value in values if isinstance(value, list) for item in value]

    if isinstance(data, list):
        return [str(item) for item in data]
    return [str(data)]


class OpaEvaluator:
    """Evaluates a document against a compiled policy with ``opa eval``."""

    def __init__(
        self,
        config: EvaluatorConfig | None = None,
        query: str = DEFAULT_QUERY,
        rego_syntax: RegoSyntax = RegoSyntax.V0,
    ):
        self.config = config or EvaluatorConfig()
        self.query = query
        self.rego_syntax = RegoSyntax(rego_syntax)

    @property
    def v0_compatible(self) -> bool:
        """Whether opa 1.x must be told to accept v0 policy syntax."""
        if self.config.v0_compatible is None:
            return self.rego_syntax == RegoSyntax.V0
        return self.config.v0_compatible

    def build_command(self, document_path: Path, policy_path: Path) -> list[str]:
        command = [
            self.config.command, "eval",
            "--format", EvaluatorFormat(self.config.format).value,
            "--input", Path(document_path).as_posix(),
            "--data", Path(policy_path).as_posix(),
        ]
        if self.v0_compatible:
            command.append("--v0-compatible")
        command.append(self.query)
        return command

    async def evaluate(self, document_path: Path, policy_path: Path) -> str:
        """Run the denial query and return its output.

        Returns:
            Evaluator output exactly as printed, or an empty string when
            no denial matched

        Raises:
            EvaluationError: On missing binary, timeout, non-zero exit or stderr output
        """
        command = self.build_command(document_path, policy_path)
        try:
            result = await run_command(command, timeout=self.config.timeout_seconds)
        except OSError as e:
            raise EvaluationError(f"Failed to run {self.config.command}", str(e))
        except CommandTimeout as e:
            raise EvaluationError(f"Policy evaluation of {Path(document_path).name} timed out", str(e))

        if result.failed:
            raise EvaluationError(f"{self.config.command} eval failed", result.diagnostic)

        if is_empty_result(result.stdout):
            logger.info(f"No denials for {document_path}")
            return ""

        return result.stdout
