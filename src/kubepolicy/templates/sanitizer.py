"""Best-effort conversion of Helm templates into plain YAML.

Used only when the helm binary is unavailable. Substitutions run in a fixed
order: known values references, then ``include`` expressions, then every
remaining ``{{ ... }}`` span. The last pass would swallow the earlier
patterns, so the order must not change.
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from kubepolicy.config import SanitizerConfig
from kubepolicy.errors import PolicyIOError, SchemaError

logger = logging.getLogger(__name__)

INCLUDE_PATTERN = re.compile(r'{{\s*include\s*".*?"\s*.*?}}')
EXPRESSION_PATTERN = re.compile(r"{{.*?}}")


def values_pattern(key: str) -> re.Pattern:
    """Pattern for ``{{ .Values.<key> }}`` with optional inner whitespace."""
    return re.compile(r"{{\s*\.Values\." + re.escape(key) + r"\s*}}")


class TemplateSanitizer:
    """Replaces template expressions with placeholder literals."""

    def __init__(self, config: SanitizerConfig | None = None):
        self.config = config or SanitizerConfig()
        self._value_patterns = [
            (values_pattern(key), placeholder)
            for key, placeholder in self.config.value_placeholders.items()
        ]

    def sanitize(self, text: str) -> str:
        for pattern, placeholder in self._value_patterns:
            text = pattern.sub(lambda _: placeholder, text)
        text = INCLUDE_PATTERN.sub(lambda _: self.config.include_placeholder, text)
        return EXPRESSION_PATTERN.sub("", text)

    def sanitize_file(self, document_path: Path) -> Path:
        """Sanitize a template document into a sibling file.

        Returns:
            Path of the sanitized document

        Raises:
            PolicyIOError: If the template cannot be read or the result written
        """
        document_path = Path(document_path)
        try:
            content = document_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PolicyIOError(f"Failed to read template '{document_path.name}'", str(e))

        sanitized = self.sanitize(content)
        sanitized_path = document_path.parent / self.config.sanitized_file
        try:
            sanitized_path.write_text(sanitized, encoding="utf-8")
        except OSError as e:
            raise PolicyIOError(f"Failed to write '{sanitized_path.name}'", str(e))

        logger.debug(f"Sanitized YAML content:\n{sanitized}")
        return sanitized_path


def validate_structure(text: str) -> Any:
    """Parse sanitized text and require a mapping or sequence at the top level.

    Multi-document streams are accepted when every document is a mapping or
    sequence; the first document is returned.

    Raises:
        SchemaError: If the text does not parse or yields a scalar/empty document
    """
    try:
        documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as e:
        raise SchemaError("Error parsing sanitized YAML", str(e))

    if not documents or not all(isinstance(doc, (dict, list)) for doc in documents):
        raise SchemaError("Invalid YAML structure after sanitization")

    return documents[0]
