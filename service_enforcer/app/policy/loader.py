"""
Policy loading helpers for Enforcer Service.
"""

from typing import Any, Iterable, Mapping, Optional

import pydantic

from shared.logging import get_logger
from shared.errors import PolicyFormatError, ValidationError
from .models import Policy

logger = get_logger("enforcer.policy_loader")


def load_policy(data: Mapping[str, Any], strict: bool = False) -> Policy:
    """Build a Policy from a definition mapping.

    With strict=True a policy failing check_format raises PolicyFormatError;
    otherwise the problem is logged and the policy returned as-is.
    """
    try:
        policy = Policy.model_validate(dict(data))
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Invalid policy definition",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)}
        )

    ok, reason = policy.check_format()
    if not ok:
        if strict:
            raise PolicyFormatError(
                reason,
                details={"policy_type": policy.policy_type.value, "namespace": policy.namespace}
            )
        logger.warning(
            "Policy format check failed",
            reason=reason,
            policy_type=policy.policy_type.value,
            namespace=policy.namespace
        )

    return policy


def merge_policies(policies: Iterable[Optional[Policy]]) -> Policy:
    """Merge policies in order into one effective rule-set."""
    merged = Policy()
    for policy in policies:
        if policy is None:
            continue
        merged = merged.merge(policy)
    return merged
