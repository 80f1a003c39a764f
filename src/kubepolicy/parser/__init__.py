"""Parser modules for kubepolicy input documents."""

from kubepolicy.parser.rules import RuleSetParser

__all__ = [
    "RuleSetParser",
]
