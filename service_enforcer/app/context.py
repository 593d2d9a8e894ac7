"""
Request context for policy evaluation.
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from shared.logging import get_logger

logger = get_logger("enforcer.context")


@dataclass
class ServiceAccount:
    """Resolved service identity of a caller."""
    name: str
    namespace: str
    annotations: Dict[str, str] = field(default_factory=dict)


class ServiceAccountSlot:
    """Request-owned cache cell for the caller's resolved service account.

    Written at most once per request; later writes are ignored.
    """

    def __init__(self):
        self._value: Optional[ServiceAccount] = None

    @property
    def value(self) -> Optional[ServiceAccount]:
        return self._value

    @property
    def is_resolved(self) -> bool:
        return self._value is not None

    def get(self) -> Optional[ServiceAccount]:
        return self._value

    def set(self, service_account: ServiceAccount) -> ServiceAccount:
        """Store the resolved account; returns whichever account is cached."""
        if self._value is not None:
            logger.debug(
                "Service account already resolved for request",
                cached=self._value.name,
                ignored=service_account.name
            )
            return self._value
        self._value = service_account
        return service_account


@dataclass
class RequestContext:
    """Attributes of one inbound resource-change request."""
    namespace: str = ""
    name: str = ""
    operation: str = ""
    api_group: str = ""
    api_version: str = ""
    kind: str = ""
    user_name: str = ""
    user_groups: List[str] = field(default_factory=list)
    type: str = ""
    k8s_created_by: str = ""
    is_creator: bool = False
    service_account: ServiceAccountSlot = field(default_factory=ServiceAccountSlot, repr=False, compare=False)

    def parse_service_account_user(self) -> Optional[Tuple[str, str]]:
        """Return (namespace, name) for "system:...:<namespace>:<name>" users."""
        user_name = self.user_name
        if not user_name.startswith("system:"):
            return None
        parts = user_name.split(":")
        return parts[-2], parts[-1]
