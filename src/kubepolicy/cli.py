"""CLI interface for kubepolicy using Typer framework."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler

from kubepolicy import __description__, __version__
from kubepolicy.compiler import PolicyCompiler, PolicyWriter
from kubepolicy.config import KubePolicyConfig, LogLevel, load_config
from kubepolicy.errors import KubePolicyError
from kubepolicy.parser import RuleSetParser
from kubepolicy.pipeline import ConsoleReporter, TriggerKind, ValidationOrchestrator
from kubepolicy.pipeline.reporting import REPORT_FORMATS
from kubepolicy.schemas import SchemaGenerator
from kubepolicy.templates import TemplateSanitizer, detect_template_file, validate_structure
from kubepolicy.triggers import build_request, is_structured_document

app = typer.Typer(
    name="kubepolicy",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
err_console = Console(stderr=True)

LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"kubepolicy version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """kubepolicy - validate Kubernetes manifests with rules compiled to Rego."""


def _configure_logging(level: str | None, config: KubePolicyConfig) -> None:
    """Route log records to stderr through rich."""
    try:
        log_level = LogLevel(level or config.logging.level)
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid log level '{level}'. Must be one of: {', '.join(l.value for l in LogLevel)}")
        raise typer.Exit(2)
    logging.basicConfig(
        level=LOG_LEVELS[log_level],
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config_or_exit(config: Path | None, workspace: Path) -> KubePolicyConfig:
    try:
        return load_config(config, start_dir=workspace)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.command()
def validate(
    document: Annotated[
        Path,
        typer.Argument(help="Manifest or Helm template to validate")
    ],
    workspace: Annotated[
        Path,
        typer.Option("--workspace", "-w", help="Workspace root containing the policies folder (default: current)")
    ] = Path("."),
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .kubepolicy.json)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json, markdown (default: table)")
    ] = "table",
    no_render: Annotated[
        bool,
        typer.Option("--no-render", help="Never call helm; sanitize templates instead")
    ] = False,
    trigger: Annotated[
        TriggerKind,
        typer.Option("--trigger", help="What triggered the run: manual or save")
    ] = TriggerKind.MANUAL,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", "-l", help="Log level: error, warn, info, debug")
    ] = None,
) -> None:
    """Validate one manifest against the workspace rule set.

    Exit codes: 0 no violations, 1 violations found, 2 validation failed.

    Policies generated with v0 syntax are evaluated with [bold]--v0-compatible[/bold]
    so opa 1.x accepts them. Set evaluator.v0Compatible to false for opa 0.x, or
    policies.regoSyntax to v1.
    """
    if format not in REPORT_FORMATS:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(REPORT_FORMATS)}")
        raise typer.Exit(2)

    workspace = workspace.resolve()
    kp_config = _load_config_or_exit(config, workspace)
    if no_render:
        kp_config.renderer.enabled = False
    _configure_logging(log_level, kp_config)

    if trigger == TriggerKind.SAVE and not is_structured_document(document):
        console.print(f"[dim]Skipping non-YAML document: {document}[/dim]")
        raise typer.Exit(0)

    reporter = ConsoleReporter(console=console, format=format)
    orchestrator = ValidationOrchestrator(kp_config, reporter=reporter)
    request = build_request(document, workspace, trigger)
    result = asyncio.run(orchestrator.run(request))
    raise typer.Exit(result.exit_code)


@app.command("compile")
def compile_command(
    workspace: Annotated[
        Path,
        typer.Option("--workspace", "-w", help="Workspace root containing the policies folder (default: current)")
    ] = Path("."),
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .kubepolicy.json)")
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Write the policy here instead of the workspace policies folder")
    ] = None,
    stdout: Annotated[
        bool,
        typer.Option("--stdout", help="Print the generated policy instead of writing it")
    ] = False,
) -> None:
    """Compile the workspace rule set into the generated Rego policy."""
    workspace = workspace.resolve()
    kp_config = _load_config_or_exit(config, workspace)
    _configure_logging(None, kp_config)

    try:
        if stdout or out:
            rule_set = RuleSetParser.parse_rules_from_workspace(workspace, kp_config)
            policy = PolicyCompiler(kp_config.policies).compile(rule_set)
            if stdout:
                typer.echo(policy.source, nl=False)
                return
            policy_path = PolicyWriter.write(policy, out.resolve())
        else:
            orchestrator = ValidationOrchestrator(kp_config, reporter=ConsoleReporter(console=console, quiet=True))
            policy_path = orchestrator.compile_policy(workspace)
    except KubePolicyError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    console.print(f"[green]Generated policy:[/green] {policy_path}")


@app.command()
def detect(
    document: Annotated[
        Path,
        typer.Argument(help="Document to scan for Helm templating syntax")
    ],
) -> None:
    """Report whether a document contains Helm templating syntax.

    Exits 0 for a template, 1 for a plain manifest.
    """
    try:
        is_template = detect_template_file(document)
    except KubePolicyError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    if is_template:
        console.print(f"[yellow]Template:[/yellow] {document}")
        raise typer.Exit(0)
    console.print(f"[green]Plain manifest:[/green] {document}")
    raise typer.Exit(1)


@app.command()
def sanitize(
    document: Annotated[
        Path,
        typer.Argument(help="Helm template to sanitize into plain YAML")
    ],
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .kubepolicy.json)")
    ] = None,
    check: Annotated[
        bool,
        typer.Option("--check", help="Verify the sanitized document parses as structured YAML")
    ] = False,
) -> None:
    """Replace template expressions with placeholders and write the sibling sanitized file."""
    kp_config = _load_config_or_exit(config, document.resolve().parent)
    sanitizer = TemplateSanitizer(kp_config.sanitizer)

    try:
        sanitized_path = sanitizer.sanitize_file(document)
        if check:
            validate_structure(sanitized_path.read_text(encoding="utf-8"))
    except KubePolicyError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    console.print(f"[green]Sanitized document:[/green] {sanitized_path}")


@app.command()
def schema(
    out: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output directory for generated schemas (default: ./schemas)")
    ] = Path("schemas"),
) -> None:
    """Generate JSON schemas for the rules and configuration documents."""
    generator = SchemaGenerator()
    generator.generate_all_schemas()
    schema_files = generator.save_schemas(out.resolve())

    console.print(f"[green]Generated {len(schema_files)} JSON schemas:[/green]")
    for schema_name, schema_file in schema_files.items():
        console.print(f"  • {schema_name}: {schema_file}")

    errors = generator.validate_schema_compliance()
    if errors:
        console.print("[yellow]Schema validation warnings:[/yellow]")
        for error in errors:
            console.print(f"  • {error}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
