"""JSON Schema generation from Pydantic models for kubepolicy documents."""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
from pydantic import BaseModel

from ..config import KubePolicyConfig
from ..models.rules import RuleSet

logger = logging.getLogger(__name__)

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


class SchemaGenerator:
    """Generates JSON schemas for the rule set and configuration documents."""

    def __init__(self):
        self.schemas: dict[str, dict[str, Any]] = {}

    def generate_all_schemas(self) -> dict[str, dict[str, Any]]:
        """Generate JSON schemas for all kubepolicy document types.

        Returns:
            Dictionary mapping document names to JSON schemas
        """
        self.schemas = {
            "rules": self._model_to_schema(
                RuleSet,
                "kubepolicy-rules-v1",
                "Declarative rule set compiled into Rego (policies/rules.yaml)",
            ),
            "config": self._model_to_schema(
                KubePolicyConfig,
                "kubepolicy-config-v1",
                "kubepolicy configuration file (.kubepolicy.json)",
            ),
        }
        logger.info(f"Generated {len(self.schemas)} JSON schemas")
        return self.schemas

    def save_schemas(self, output_dir: Path) -> dict[str, Path]:
        """Save generated schemas to ``<name>.schema.json`` files."""
        output_dir.mkdir(parents=True, exist_ok=True)
        schema_files = {}

        for schema_name, schema in self.schemas.items():
            schema_file = output_dir / f"{schema_name}.schema.json"
            with open(schema_file, "w", encoding="utf-8") as f:
                json.dump(schema, f, indent=2, ensure_ascii=False)
            schema_files[schema_name] = schema_file
            logger.debug(f"Saved schema: {schema_file}")

        return schema_files

    def _model_to_schema(self, model_class: type[BaseModel], title: str, description: str) -> dict[str, Any]:
        schema = model_class.model_json_schema(by_alias=True)
        schema["$schema"] = SCHEMA_DIALECT
        schema["title"] = title
        schema["description"] = description
        schema["version"] = "1.0"
        return schema

    def validate_schema_compliance(self) -> list[str]:
        """Check every generated schema against the JSON Schema meta-schema.

        Returns:
            List of validation errors (empty if all schemas are valid)
        """
        errors = []
        for schema_name, schema in self.schemas.items():
            try:
                jsonschema.Draft202012Validator.check_schema(schema)
            except jsonschema.SchemaError as e:
                error_msg = f"Schema {schema_name} is invalid: {e.message}"
                errors.append(error_msg)
                logger.error(error_msg)
        return errors
