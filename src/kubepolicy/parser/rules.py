"""Rule set (policies/rules.yaml) parser implementation."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from kubepolicy.config import KubePolicyConfig
from kubepolicy.errors import ParseError, PolicyIOError, RuleSetNotFoundError, SchemaError
from kubepolicy.models.rules import RuleSet

logger = logging.getLogger(__name__)


class RuleSetParser:
    """Parser for declarative rule set documents."""

    @staticmethod
    def find_rules_file(workspace_root: Path, config: KubePolicyConfig | None = None) -> Path | None:
        """Find the rule set document in the given workspace.

        Args:
            workspace_root: Workspace directory holding the policies folder
            config: Configuration naming the policies folder and rules file

        Returns:
            Path to the rules file if found, None otherwise
        """
        config = config or KubePolicyConfig()
        rules_file = config.rules_path(workspace_root)
        if rules_file.exists() and rules_file.is_file():
            return rules_file
        return None

    @staticmethod
    def parse_text(content: str, source: str = "<string>") -> RuleSet:
        """Parse rule set document text into a RuleSet.

        Unknown operator strings are accepted here; the compiler decides
        whether to reject them.

        Raises:
            ParseError: If the text is not well-formed YAML
            SchemaError: If the document has no ``rules`` array or a rule is malformed
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse '{source}'. Ensure it is valid YAML", str(e))

        if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
            raise SchemaError(f"Invalid structure in '{source}'. Expected a 'rules' array")

        try:
            rule_set = RuleSet(**data)
        except ValidationError as e:
            raise SchemaError(f"Invalid rule definition in '{source}'", str(e))

        logger.debug(f"Parsed {len(rule_set.rules)} rules from {source}")
        return rule_set

    @classmethod
    def parse_rules(cls, rules_file: Path) -> RuleSet:
        """Parse a rule set document into a structured model.

        Args:
            rules_file: Path to the rules document

        Returns:
            RuleSet: Parsed and validated rule set

        Raises:
            RuleSetNotFoundError: If the rules file doesn't exist
            PolicyIOError: If the rules file cannot be read
            ParseError: If the rules file is not valid UTF-8 YAML
            SchemaError: If the rules file is missing required fields
        """
        rules_file = Path(rules_file)
        if not rules_file.exists():
            raise RuleSetNotFoundError(
                f"Rule file '{rules_file.name}' not found in '{rules_file.parent.name}' folder",
                str(rules_file),
            )

        try:
            content = rules_file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Failed to parse '{rules_file.name}'. Ensure it is UTF-8 encoded YAML", str(e))
        except OSError as e:
            raise PolicyIOError(f"Failed to read '{rules_file.name}'. Check the file permissions", str(e))

        return cls.parse_text(content, source=rules_file.name)

    @classmethod
    def parse_rules_from_workspace(cls, workspace_root: Path, config: KubePolicyConfig | None = None) -> RuleSet:
        """Parse the rule set of a workspace using the configured location."""
        config = config or KubePolicyConfig()
        return cls.parse_rules(config.rules_path(workspace_root))
