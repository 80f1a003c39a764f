"""JSON Schema generation for kubepolicy documents."""

from .generator import SchemaGenerator

__all__ = [
    "SchemaGenerator",
]
