"""
Policy package.

Defines the declarative rule model and the checker that evaluates it
against a single request. Rule lists are OR-combined, the fields of a
single pattern are AND-combined, and an empty field matches anything.

Modules of interest:
- pattern: Wildcard, negation, exact, and comma-list string matching.
- models: Policy, rule patterns, format checks, merge and clone.
- checker: The seven boolean queries and the ownership walk.
- loader: Building, validating, and merging policy definitions.
"""

from .models import (
    Policy, PolicyType, RequestMatchPattern, SignerMatchPattern,
    SubjectMatchPattern, AllowedUserPattern, AllowedChangeCondition,
    OwnerMatchCondition, AllowUnverifiedCondition
)
from .checker import PolicyChecker, new_policy_checker
from .loader import load_policy, merge_policies

__all__ = [
    "Policy",
    "PolicyType",
    "RequestMatchPattern",
    "SignerMatchPattern",
    "SubjectMatchPattern",
    "AllowedUserPattern",
    "AllowedChangeCondition",
    "OwnerMatchCondition",
    "AllowUnverifiedCondition",
    "PolicyChecker",
    "new_policy_checker",
    "load_policy",
    "merge_policies",
]
