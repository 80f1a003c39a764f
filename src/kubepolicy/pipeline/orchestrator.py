"""Validation pipeline for a single manifest document.

Stages run strictly in sequence inside one task:

    START -> DETECT_TEMPLATE -> RENDER | SANITIZE_FALLBACK -> COMPILE -> EVALUATE -> REPORT

The first failure ends the run; the result is handed to the reporter once.
"""

import asyncio
import logging
from pathlib import Path

from kubepolicy.adapters.helm import TemplateRenderer, create_renderer
from kubepolicy.adapters.opa import OpaEvaluator
from kubepolicy.compiler.rego import PolicyCompiler, PolicyWriter
from kubepolicy.config import KubePolicyConfig
from kubepolicy.errors import ErrorKind, KubePolicyError, PolicyIOError
from kubepolicy.parser.rules import RuleSetParser
from kubepolicy.templates.detector import detect_template_file
from kubepolicy.templates.sanitizer import TemplateSanitizer, validate_structure

from .reporting import LogReporter, Reporter
from .result import PipelineStage, ValidationRequest, ValidationResult

logger = logging.getLogger(__name__)


class ValidationOrchestrator:
    """Runs validation requests through detection, rendering, compilation and evaluation."""

    def __init__(
        self,
        config: KubePolicyConfig | None = None,
        renderer: TemplateRenderer | None = None,
        evaluator: OpaEvaluator | None = None,
        reporter: Reporter | None = None,
    ):
        self.config = config or KubePolicyConfig()
        self.renderer = renderer or create_renderer(self.config.renderer)
        self.evaluator = evaluator or OpaEvaluator(
            self.config.evaluator,
            query=self.config.policies.query,
            rego_syntax=self.config.policies.rego_syntax,
        )
        self.reporter = reporter or LogReporter()
        self.compiler = PolicyCompiler(self.config.policies)
        self.sanitizer = TemplateSanitizer(self.config.sanitizer)
        self._locks: dict[Path, asyncio.Lock] = {}

    def _workspace_lock(self, workspace_root: Path) -> asyncio.Lock:
        key = Path(workspace_root).resolve()
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def run(self, request: ValidationRequest) -> ValidationResult:
        """Validate one document and report the outcome."""
        if self.config.run.serialize:
            async with self._workspace_lock(request.workspace_root):
                result = await self._run(request)
        else:
            result = await self._run(request)

        self.reporter.report(result)
        return result

    def compile_policy(self, workspace_root: Path) -> Path:
        """Load the workspace rule set, compile it and write the generated policy.

        Raises:
            RuleSetNotFoundError: If the rules document is absent
            ParseError, SchemaError: If the rules document is invalid
            PolicyIOError: If the policy cannot be written
        """
        rules_path = self.config.rules_path(workspace_root)
        policy_path = self.config.generated_policy_path(workspace_root)
        logger.debug(f"Rule file path: {rules_path}")
        logger.debug(f"Rego file path: {policy_path}")

        rule_set = RuleSetParser.parse_rules(rules_path)
        policy = self.compiler.compile(rule_set)
        PolicyWriter.write(policy, policy_path)
        self.reporter.info(f"Rego file generated successfully at: {policy_path}")
        return policy_path

    async def _run(self, request: ValidationRequest) -> ValidationResult:
        document_path = Path(request.document_path)
        stage = PipelineStage.START
        target = document_path
        warnings: list[str] = []
        logger.info(f"Validating {document_path} ({request.trigger.value} trigger)")

        try:
            stage = PipelineStage.DETECT_TEMPLATE
            is_template = request.is_template
            if is_template is None:
                is_template = detect_template_file(document_path)

            if is_template:
                if await self.renderer.is_available():
                    stage = PipelineStage.RENDER
                    target = await self.renderer.render(document_path)
                else:
                    stage = PipelineStage.SANITIZE_FALLBACK
                    warning = (
                        f"Template renderer '{self.renderer.name}' is not installed or not in your PATH. "
                        "Proceeding as regular YAML with sanitized Helm syntax."
                    )
                    warnings.append(warning)
                    self.reporter.warning(warning)
                    target = self._sanitize(document_path)

            stage = PipelineStage.COMPILE
            policy_path = self.compile_policy(request.workspace_root)

            stage = PipelineStage.EVALUATE
            output = await self.evaluator.evaluate(target, policy_path)

            stage = PipelineStage.REPORT
            if output:
                return ValidationResult.violations(
                    output, document_path=document_path, evaluated_path=target, warnings=warnings
                )
            return ValidationResult.no_violations(
                document_path=document_path, evaluated_path=target, warnings=warnings
            )

        except KubePolicyError as e:
            logger.error(f"Validation of {document_path} failed during {stage.value}: {e}")
            return ValidationResult.failure(
                e.kind, str(e), stage=stage, document_path=document_path,
                evaluated_path=target, warnings=warnings,
            )
        except Exception as e:
            logger.exception(f"Unexpected error validating {document_path}")
            return ValidationResult.failure(
                ErrorKind.UNKNOWN_ERROR, str(e) or "An unknown error occurred.", stage=stage,
                document_path=document_path, evaluated_path=target, warnings=warnings,
            )

    def _sanitize(self, document_path: Path) -> Path:
        sanitized_path = self.sanitizer.sanitize_file(document_path)
        try:
            content = sanitized_path.read_text(encoding="utf-8")
        except OSError as e:
            raise PolicyIOError(f"Failed to read '{sanitized_path.name}'", str(e))
        validate_structure(content)
        return sanitized_path
