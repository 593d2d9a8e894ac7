"""
Policy checker for Enforcer Service.

Evaluates one effective Policy against one RequestContext. Every query
fails closed: a missing policy, an empty rule list, a failed identity
lookup or a malformed annotation all read as "no match".
"""

from typing import List, Optional

from shared.logging import get_logger
from ..context import RequestContext, ServiceAccount
from ..identity.client import ServiceAccountLookup
from .models import Policy, RequestMatchPattern, AllowedUserPattern
from .pattern import match_pattern

INTEGRITY_ANNOTATIONS = ("integrityVerified", "integrityUnverified")

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(value: str) -> bool:
    """Parse a boolean annotation value; raises ValueError if malformed."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


class PolicyChecker:
    """Answers the enforcement queries for a single request."""

    def __init__(self, policy: Optional[Policy], reqc: RequestContext,
                 lookup: Optional[ServiceAccountLookup] = None):
        self.policy = policy
        self.reqc = reqc
        self.lookup = lookup
        self.logger = get_logger(
            "enforcer.policy_checker",
            namespace=reqc.namespace,
            kind=reqc.kind,
            name=reqc.name,
            operation=reqc.operation,
            user=reqc.user_name
        )

    def _check(self, patterns: List[RequestMatchPattern]) -> bool:
        for pattern in patterns:
            if pattern.match(self.reqc):
                return True
        return False

    def is_trust_state_enforcement_disabled(self) -> bool:
        """True if the request namespace is listed in allowUnverified."""
        if self.policy is None:
            return False
        # Exact comparison, no pattern semantics
        for condition in self.policy.allow_unverified:
            if condition.namespace == self.reqc.namespace:
                return True
        return False

    def is_ignore_request(self) -> bool:
        if self.policy is None:
            return False
        return self._check(self.policy.ignore_request)

    def is_enforce_result(self) -> bool:
        """True if an enforce rule matches and no ignore rule does."""
        if self.is_ignore_request():
            return False
        if self.policy is None:
            return False
        return self._check(self.policy.enforce)

    def is_allowed_for_internal_request(self) -> bool:
        if self.policy is None:
            return False
        return self._check(self.policy.allowed_for_internal_request)

    def is_allowed_by_rule(self) -> bool:
        if self.policy is None:
            return False
        return self._check(self.policy.allowed_by_rule)

    def permit_if_creator(self) -> bool:
        """Ownership walk over permitIfCreator, only for the resource creator."""
        if not self.reqc.is_creator:
            return False
        if self.policy is None:
            return False
        return self._is_authorized_service_account(self.policy.permit_if_creator, "permitIfCreator")

    def permit_if_verified_owner(self) -> bool:
        """Ownership walk over permitIfVerifiedOwner."""
        if self.policy is None:
            return False
        return self._is_authorized_service_account(self.policy.permit_if_verified_owner, "permitIfVerifiedOwner")

    def _is_authorized_service_account(self, patterns: List[AllowedUserPattern], rule: str) -> bool:
        """First-match-wins walk over ownership entries."""
        for index, pattern in enumerate(patterns):
            if not pattern.request.match(self.reqc):
                continue

            if pattern.authorized_service_account:
                user_name = self.reqc.user_name.split(":")[-1]
                for authorized in pattern.authorized_service_account:
                    if match_pattern(authorized, user_name):
                        self.logger.debug(
                            "Authorized service account matched",
                            rule=rule,
                            entry=index,
                            pattern=authorized
                        )
                        return True

            elif pattern.allow_changes_by_signed_service_account:
                service_account = self._resolve_service_account()
                if service_account is None:
                    continue
                if self._has_integrity_annotation(service_account, rule, index):
                    self.logger.debug(
                        "Signed service account permitted",
                        rule=rule,
                        entry=index,
                        service_account=service_account.name
                    )
                    return True

        return False

    def _resolve_service_account(self) -> Optional[ServiceAccount]:
        slot = self.reqc.service_account
        if slot.is_resolved:
            return slot.get()

        parsed = self.reqc.parse_service_account_user()
        if parsed is None:
            return None
        if self.lookup is None:
            self.logger.debug("No service account lookup configured")
            return None

        namespace, name = parsed
        try:
            service_account = self.lookup(name, namespace)
        except Exception as e:
            self.logger.warning(
                "Service account lookup failed",
                service_account=f"{namespace}/{name}",
                error=str(e)
            )
            return None
        return slot.set(service_account)

    def _has_integrity_annotation(self, service_account: ServiceAccount, rule: str, index: int) -> bool:
        """True if the first parseable integrity annotation set to true is found.

        A malformed value abandons the entry.
        """
        for key in INTEGRITY_ANNOTATIONS:
            if key not in service_account.annotations:
                continue
            value = service_account.annotations[key]
            try:
                if parse_bool(value):
                    return True
            except ValueError:
                self.logger.warning(
                    "Malformed integrity annotation",
                    rule=rule,
                    entry=index,
                    annotation=key,
                    value=value
                )
                return False
        return False


def new_policy_checker(policy: Optional[Policy], reqc: RequestContext,
                       lookup: Optional[ServiceAccountLookup] = None) -> PolicyChecker:
    """Create a policy checker for one request."""
    return PolicyChecker(policy, reqc, lookup)
