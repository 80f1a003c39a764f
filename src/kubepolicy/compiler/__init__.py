"""Rule set to policy-as-code compilation."""

from .rego import CompiledPolicy, PolicyCompiler, PolicyWriter, rewrite_wildcards

__all__ = [
    "CompiledPolicy",
    "PolicyCompiler",
    "PolicyWriter",
    "rewrite_wildcards",
]
