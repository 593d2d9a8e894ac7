"""
Identity package for Enforcer Service.

Resolves the service account a caller authenticates as, so the policy
checker can read its integrity annotations. A lookup is any callable
taking (name, namespace) and returning a ServiceAccount, raising on
failure; KubeServiceAccountClient is the Kubernetes API implementation.
"""

from .client import KubeServiceAccountClient, ServiceAccountLookup

__all__ = ["KubeServiceAccountClient", "ServiceAccountLookup"]
