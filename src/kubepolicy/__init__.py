"""kubepolicy - Rule-to-Rego policy validation for Kubernetes manifests.

kubepolicy compiles a declarative rule set into a Rego policy and validates
plain or Helm-templated manifests against it with Open Policy Agent.
"""

__version__ = "0.1.0"
__description__ = "Validate Kubernetes manifests against declarative rules compiled to Rego"

from kubepolicy.config import KubePolicyConfig

__all__ = [
    "__version__",
    "__description__",
    "KubePolicyConfig",
]
