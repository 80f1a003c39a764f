"""Helm template detection and fallback sanitization."""

from .detector import detect_template, detect_template_file
from .sanitizer import TemplateSanitizer, validate_structure

__all__ = [
    "detect_template",
    "detect_template_file",
    "TemplateSanitizer",
    "validate_structure",
]
