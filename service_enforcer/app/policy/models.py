"""
Policy data models for Enforcer Service.
"""

from typing import Dict, Any, List, Tuple, TYPE_CHECKING
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .pattern import match_pattern, match_pattern_with_array, group_version

if TYPE_CHECKING:
    from ..context import RequestContext


class PolicyType(str, Enum):
    """Policy types."""
    UNKNOWN = ""
    DEFAULT = "DefaultPolicy"
    IE = "IEPolicy"
    SIGNER = "SignerPolicy"
    CUSTOM = "CustomPolicy"


class RuleModel(BaseModel):
    """Base for rule models; accepts both field names and definition keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # null in a definition (e.g. a bare "enforce:" in YAML) means the zero value
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the definition shape, omitting empty fields."""
        return _prune(self.model_dump(by_alias=True, mode="json"))


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _prune(value)
        elif isinstance(value, list):
            value = [_prune(v) if isinstance(v, dict) else v for v in value]
        if value in ("", [], {}, False, None):
            continue
        result[key] = value
    return result


class RequestMatchPattern(RuleModel):
    """Request attributes a rule applies to. Empty fields match anything."""
    namespace: str = ""
    name: str = ""
    operation: str = ""
    api_version: str = Field("", alias="apiVersion")
    kind: str = ""
    user_name: str = Field("", alias="username")
    type: str = ""
    k8s_created_by: str = Field("", alias="k8screatedby")
    user_group: str = Field("", alias="usergroup")

    def match(self, reqc: "RequestContext") -> bool:
        """Check whether every field of this pattern matches the request."""
        api_version = group_version(reqc.api_group, reqc.api_version)
        # A caller without groups is matched as having a single empty group
        user_groups = reqc.user_groups or [""]

        return (
            match_pattern(self.namespace, reqc.namespace) and
            match_pattern(self.name, reqc.name) and
            match_pattern(self.operation, reqc.operation) and
            match_pattern(self.kind, reqc.kind) and
            match_pattern(self.api_version, api_version) and
            match_pattern(self.user_name, reqc.user_name) and
            match_pattern(self.type, reqc.type) and
            match_pattern(self.k8s_created_by, reqc.k8s_created_by) and
            match_pattern_with_array(self.user_group, user_groups)
        )

    def clone(self) -> "RequestMatchPattern":
        return RequestMatchPattern(
            namespace=self.namespace,
            name=self.name,
            operation=self.operation,
            api_version=self.api_version,
            kind=self.kind,
            user_name=self.user_name,
            type=self.type,
            k8s_created_by=self.k8s_created_by,
            user_group=self.user_group,
        )


class SubjectMatchPattern(RuleModel):
    """Signer identity trusted by a signer rule."""
    email: str = ""
    uid: str = ""

    def match(self, email: str, uid: str) -> bool:
        return match_pattern(self.email, email) and match_pattern(self.uid, uid)

    def clone(self) -> "SubjectMatchPattern":
        return SubjectMatchPattern(email=self.email, uid=self.uid)


class SignerMatchPattern(RuleModel):
    """Signer trusted for requests matching the embedded pattern."""
    request: RequestMatchPattern = Field(default_factory=RequestMatchPattern)
    subject: SubjectMatchPattern = Field(default_factory=SubjectMatchPattern)

    def clone(self) -> "SignerMatchPattern":
        return SignerMatchPattern(
            request=self.request.clone(),
            subject=self.subject.clone(),
        )


class AllowedUserPattern(RuleModel):
    """Ownership/creator exception for requests matching the embedded pattern."""
    allow_changes_by_signed_service_account: bool = Field(False, alias="allowChangesBySignedServiceAccount")
    authorized_service_account: List[str] = Field(default_factory=list, alias="authorizedServiceAccount")
    request: RequestMatchPattern = Field(default_factory=RequestMatchPattern)

    def clone(self) -> "AllowedUserPattern":
        return AllowedUserPattern(
            allow_changes_by_signed_service_account=self.allow_changes_by_signed_service_account,
            authorized_service_account=list(self.authorized_service_account),
            request=self.request.clone(),
        )


class OwnerMatchCondition(RuleModel):
    """Owning resource a change condition refers to."""
    kind: str = ""
    api_version: str = Field("", alias="apiVersion")
    name: str = ""

    def match(self, kind: str, api_version: str, name: str) -> bool:
        return (
            match_pattern(self.kind, kind) and
            match_pattern(self.api_version, api_version) and
            match_pattern(self.name, name)
        )

    def clone(self) -> "OwnerMatchCondition":
        return OwnerMatchCondition(kind=self.kind, api_version=self.api_version, name=self.name)


class AllowedChangeCondition(RuleModel):
    """Fields that may change when the resource is owned by a given owner."""
    request: RequestMatchPattern = Field(default_factory=RequestMatchPattern)
    key: List[str] = Field(default_factory=list)
    owner: OwnerMatchCondition = Field(default_factory=OwnerMatchCondition)

    def clone(self) -> "AllowedChangeCondition":
        return AllowedChangeCondition(
            request=self.request.clone(),
            key=list(self.key),
            owner=self.owner.clone(),
        )


class AllowUnverifiedCondition(RuleModel):
    """Namespace in which trust state is not enforced (exact match)."""
    namespace: str = ""

    def clone(self) -> "AllowUnverifiedCondition":
        return AllowUnverifiedCondition(namespace=self.namespace)


class Policy(RuleModel):
    """Rule-set for one scope."""
    enforce: List[RequestMatchPattern] = Field(default_factory=list)
    allow_unverified: List[AllowUnverifiedCondition] = Field(default_factory=list, alias="allowUnverified")
    ignore_request: List[RequestMatchPattern] = Field(default_factory=list, alias="ignoreRequest")
    allowed_signer: List[SignerMatchPattern] = Field(default_factory=list, alias="allowedSigner")
    allowed_for_internal_request: List[RequestMatchPattern] = Field(default_factory=list, alias="allowedForInternalRequest")
    allowed_by_rule: List[RequestMatchPattern] = Field(default_factory=list, alias="allowedByRule")
    allowed_change: List[AllowedChangeCondition] = Field(default_factory=list, alias="allowedChange")
    permit_if_verified_owner: List[AllowedUserPattern] = Field(default_factory=list, alias="permitIfVerifiedOwner")
    permit_if_creator: List[AllowedUserPattern] = Field(default_factory=list, alias="permitIfCreator")
    namespace: str = ""
    policy_type: PolicyType = Field(PolicyType.UNKNOWN, alias="policyType")

    def check_format(self) -> Tuple[bool, str]:
        """Check structural invariants. Returns (valid, reason)."""
        p_type = self.policy_type
        ns = self.namespace

        if p_type == PolicyType.UNKNOWN:
            return False, "\"policyType\" must be set for any Policy"

        if ns and p_type in (PolicyType.DEFAULT, PolicyType.IE, PolicyType.SIGNER):
            return False, f"\"namespace\" must be empty for {p_type.value}"
        if not ns and p_type == PolicyType.CUSTOM:
            return False, f"\"namespace\" must be specified for {p_type.value}"

        if p_type == PolicyType.SIGNER:
            has_other_rules = any([
                self.enforce,
                self.ignore_request,
                self.allowed_for_internal_request,
                self.allowed_by_rule,
                self.allowed_change,
                self.permit_if_verified_owner,
                self.permit_if_creator,
            ])
            if has_other_rules:
                return False, f"{p_type.value} must contain only AllowedSigner rule"

        if p_type == PolicyType.CUSTOM and self.allowed_signer:
            return False, f"{p_type.value} must not contain AllowedSigner rule"

        return True, ""

    def merge(self, other: "Policy") -> "Policy":
        """Concatenate every rule list, self first. Namespace and type are not carried over."""
        return Policy(
            enforce=self.enforce + other.enforce,
            ignore_request=self.ignore_request + other.ignore_request,
            allowed_signer=self.allowed_signer + other.allowed_signer,
            allowed_for_internal_request=self.allowed_for_internal_request + other.allowed_for_internal_request,
            allowed_by_rule=self.allowed_by_rule + other.allowed_by_rule,
            allowed_change=self.allowed_change + other.allowed_change,
            permit_if_verified_owner=self.permit_if_verified_owner + other.permit_if_verified_owner,
            permit_if_creator=self.permit_if_creator + other.permit_if_creator,
            allow_unverified=self.allow_unverified + other.allow_unverified,
        )

    def clone(self) -> "Policy":
        return Policy(
            enforce=[p.clone() for p in self.enforce],
            allow_unverified=[c.clone() for c in self.allow_unverified],
            ignore_request=[p.clone() for p in self.ignore_request],
            allowed_signer=[s.clone() for s in self.allowed_signer],
            allowed_for_internal_request=[p.clone() for p in self.allowed_for_internal_request],
            allowed_by_rule=[p.clone() for p in self.allowed_by_rule],
            allowed_change=[c.clone() for c in self.allowed_change],
            permit_if_verified_owner=[u.clone() for u in self.permit_if_verified_owner],
            permit_if_creator=[u.clone() for u in self.permit_if_creator],
            namespace=self.namespace,
            policy_type=self.policy_type,
        )
