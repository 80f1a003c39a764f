"""Surfacing of validation progress and results to the invoking collaborator."""

import json as jsonlib
import logging
from abc import ABC, abstractmethod

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .result import OutcomeKind, ValidationResult

logger = logging.getLogger(__name__)

REPORT_FORMATS = ["table", "json", "markdown"]


class Reporter(ABC):
    """Receives notifications during a run and the final result exactly once."""

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    @abstractmethod
    def report(self, result: ValidationResult) -> None:
        """Surface the terminal result of a run."""
        pass


class LogReporter(Reporter):
    """Reporter that only writes to the log."""

    def report(self, result: ValidationResult) -> None:
        if result.outcome == OutcomeKind.FAILURE:
            logger.error(f"Validation failed ({result.error_kind.value}): {result.message}")
        elif result.outcome == OutcomeKind.VIOLATIONS:
            logger.warning(f"Policy violations found:\n{result.output}")
        else:
            logger.info(result.message)


class ConsoleReporter(Reporter):
    """Reporter rendering results on a rich console."""

    def __init__(self, console: Console | None = None, format: str = "table", quiet: bool = False):
        if format not in REPORT_FORMATS:
            raise ValueError(f"Invalid format '{format}'. Must be one of: {', '.join(REPORT_FORMATS)}")
        self.console = console or Console()
        self.format = format
        self.quiet = quiet

    def info(self, message: str) -> None:
        super().info(message)
        if not self.quiet and self.format == "table":
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def warning(self, message: str) -> None:
        super().warning(message)
        if self.format == "table":
            self.console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def report(self, result: ValidationResult) -> None:
        if self.format == "json":
            self.console.print_json(jsonlib.dumps(result.to_dict()))
        elif self.format == "markdown":
            self._report_markdown(result)
        else:
            self._report_table(result)

    def _report_markdown(self, result: ValidationResult) -> None:
        self.console.print("# Validation Report")
        self.console.print(f"**Document:** {result.document_path}")
        self.console.print(f"**Outcome:** {result.outcome.value}")
        self.console.print(f"**Exit Code:** {result.exit_code}")
        self.console.print()

        if result.outcome == OutcomeKind.FAILURE:
            self.console.print("## Failure")
            self.console.print(f"- **{result.error_kind.value}** ({result.stage.value}): {escape(result.message)}")
        elif result.outcome == OutcomeKind.VIOLATIONS:
            self.console.print("## Violations")
            for reason in result.reasons:
                self.console.print(f"- {escape(reason)}")
        else:
            self.console.print(result.message)

        if result.warnings:
            self.console.print()
            self.console.print("## Warnings")
            for warning in result.warnings:
                self.console.print(f"- {escape(warning)}")

    def _report_table(self, result: ValidationResult) -> None:
        if result.outcome == OutcomeKind.NO_VIOLATIONS:
            self.console.print(f"[green]{result.message}[/green]")
            return

        if result.outcome == OutcomeKind.FAILURE:
            self.console.print(
                f"[red]Error:[/red] {escape(result.message)} "
                f"[dim]({result.error_kind.value} during {result.stage.value})[/dim]"
            )
            return

        table = Table(title=f"Policy violations: {result.document_path}")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Reason", style="yellow")
        for i, reason in enumerate(result.reasons, 1):
            table.add_row(str(i), escape(reason))
        self.console.print(table)
