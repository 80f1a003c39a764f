"""Configuration management for kubepolicy using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".kubepolicy.json"


class RegoSyntax(str, Enum):
    """Rego dialect emitted by the policy compiler."""
    V0 = "v0"
    V1 = "v1"


class EvaluatorFormat(str, Enum):
    """Output formats accepted by ``opa eval --format``."""
    JSON = "json"
    RAW = "raw"
    PRETTY = "pretty"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class PoliciesConfig(BaseModel):
    """Rule set and generated policy locations."""
    dir: str = "policies"
    rules_file: str = Field(alias="rulesFile", default="rules.yaml")
    generated_file: str = Field(alias="generatedFile", default="generated.rego")
    package: str = "kubernetes.security"
    strict_operators: bool = Field(alias="strictOperators", default=True)
    rego_syntax: RegoSyntax = Field(alias="regoSyntax", default=RegoSyntax.V0)

    @field_validator("package")
    @classmethod
    def validate_package(cls, v):
        parts = v.split(".")
        if not all(part.isidentifier() for part in parts):
            raise ValueError(f"package must be a dotted identifier, got: {v}")
        return v

    @property
    def query(self) -> str:
        """Query selecting the denial set of the generated package."""
        return f"data.{self.package}.deny"

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class RendererConfig(BaseModel):
    """External template renderer (helm) section."""
    enabled: bool = True
    command: str = "helm"
    values_file: str = Field(alias="valuesFile", default="values.yaml")
    output_dir: str = Field(alias="outputDir", default="rendered-output")
    rendered_file: str = Field(alias="renderedFile", default="kube.yaml")
    timeout_seconds: float = Field(alias="timeoutSeconds", default=60.0)

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class EvaluatorConfig(BaseModel):
    """External policy evaluator (opa) section."""
    command: str = "opa"
    format: EvaluatorFormat = EvaluatorFormat.RAW
    timeout_seconds: float = Field(alias="timeoutSeconds", default=60.0)
    # None: pass --v0-compatible whenever the generated policy uses v0 syntax
    v0_compatible: bool | None = Field(alias="v0Compatible", default=None)

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class SanitizerConfig(BaseModel):
    """Fallback sanitization of template documents."""
    value_placeholders: dict[str, str] = Field(alias="valuePlaceholders", default_factory=lambda: {
        "config.dependencyScanner": "default-dependency-scanner",
        "config.vulnerabilityDatabase": "default-vulnerability-database",
    })
    include_placeholder: str = Field(alias="includePlaceholder", default="default-name")
    sanitized_file: str = Field(alias="sanitizedFile", default="sanitized.yaml")

    model_config = ConfigDict(populate_by_name=True)


class RunConfig(BaseModel):
    """Per-request run behaviour."""
    serialize: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True)


class KubePolicyConfig(BaseModel):
    """Complete kubepolicy configuration model."""
    policies: PoliciesConfig = Field(default_factory=PoliciesConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    evaluator: EvaluatorConfig = Field(default_factory=EvaluatorConfig)
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    def rules_path(self, workspace_root: Path) -> Path:
        """Location of the rule set document inside a workspace."""
        return Path(workspace_root) / self.policies.dir / self.policies.rules_file

    def generated_policy_path(self, workspace_root: Path) -> Path:
        """Location the compiled policy is written to inside a workspace."""
        return Path(workspace_root) / self.policies.dir / self.policies.generated_file


def load_config(config_path: str | Path | None = None, start_dir: Path | None = None) -> KubePolicyConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    ``start_dir`` (or the current directory) and parents
                    for .kubepolicy.json

    Returns:
        KubePolicyConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file(start_dir)
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return KubePolicyConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

    return KubePolicyConfig()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .kubepolicy.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None
