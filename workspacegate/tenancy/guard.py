"""Policy guard predicates over a resolved ``RequestContext``.

Predicates are plain callables that return ``None`` to pass and raise
``PolicyDenied`` to stop the request. They never touch a store; everything
they need was cached on the context by the resolver.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass

from workspacegate.exceptions import ErrorCode, PolicyDenied
from workspacegate.models.domain import Principal, RequestContext, TenantRecord
from workspacegate.tenancy import membership
from workspacegate.tenancy.tiers import (
    FEATURE_ADVANCED_AUTOMATION,
    FEATURE_AUDIT_LOGS,
    FEATURE_BULK_USER_IMPORT,
    is_unlimited,
)
from workspacegate.types import PRIVILEGED_ROLES, TIER_RANK, Resource, Role, Tier

Predicate = Callable[[RequestContext], None]

_LIMIT_CODES: dict[Resource, ErrorCode] = {
    Resource.USERS: ErrorCode.USER_LIMIT_REACHED,
    Resource.TASKS: ErrorCode.TASK_LIMIT_REACHED,
    Resource.TEAMS: ErrorCode.TEAM_LIMIT_REACHED,
}

_LIMIT_NOUNS: dict[Resource, str] = {
    Resource.USERS: "User",
    Resource.TASKS: "Task",
    Resource.TEAMS: "Team",
}


def has_policy_bypass(context: RequestContext) -> bool:
    """Superusers and privileged roles pass every predicate."""
    return context.is_superuser or context.role_in_tenant in PRIVILEGED_ROLES


def bypassable(check: Predicate) -> Predicate:
    """Apply the universal bypass in front of ``check``."""

    @functools.wraps(check)
    def guarded(context: RequestContext) -> None:
        if has_policy_bypass(context):
            return
        check(context)

    return guarded


def _tenant_record(context: RequestContext, code: ErrorCode) -> TenantRecord:
    if context.tenant_record is None:
        raise PolicyDenied(code, "Workspace context not found")
    return context.tenant_record


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    resource: Resource
    limit: int
    current: int
    allowed: bool


def quota_status(record: TenantRecord, resource: Resource) -> QuotaStatus:
    """Advisory only: not atomic with the downstream counter increment."""
    limit = record.limits.for_resource(resource)
    current = record.usage.for_resource(resource)
    allowed = record.tier == Tier.STANDARD or is_unlimited(limit) or current < limit
    return QuotaStatus(resource=resource, limit=limit, current=current, allowed=allowed)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def require_tier_at_least(tier: Tier) -> Predicate:
    @bypassable
    def check_tier(context: RequestContext) -> None:
        record = _tenant_record(context, ErrorCode.TIER_RESTRICTED)
        if TIER_RANK[record.tier] < TIER_RANK[tier]:
            raise PolicyDenied(
                ErrorCode.TIER_RESTRICTED,
                f"This feature is only available for {tier} workspaces",
                requiredTier=str(tier),
                workspaceTier=str(record.tier),
            )

    return check_tier


def require_feature(name: str) -> Predicate:
    @bypassable
    def check_feature(context: RequestContext) -> None:
        record = _tenant_record(context, ErrorCode.FEATURE_NOT_AVAILABLE)
        if not record.has_feature(name):
            raise PolicyDenied(
                ErrorCode.FEATURE_NOT_AVAILABLE,
                "This feature is not available in your workspace",
                feature=name,
                workspaceTier=str(record.tier),
            )

    return check_feature


def require_under_limit(resource: Resource | str) -> Predicate:
    kind = Resource(resource)
    code = _LIMIT_CODES[kind]

    @bypassable
    def check_limit(context: RequestContext) -> None:
        status = quota_status(_tenant_record(context, code), kind)
        if not status.allowed:
            raise PolicyDenied(
                code,
                f"{_LIMIT_NOUNS[kind]} limit reached. "
                f"Your workspace is limited to {status.limit} {kind}.",
                limit=status.limit,
                current=status.current,
            )

    return check_limit


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def check(context: RequestContext, *predicates: Predicate) -> None:
    """Run predicates in order; the first denial propagates."""
    for predicate in predicates:
        predicate(context)


def all_of(*predicates: Predicate) -> Predicate:
    def composite(context: RequestContext) -> None:
        check(context, *predicates)

    return composite


def first_denial(context: RequestContext, *predicates: Predicate) -> PolicyDenied | None:
    try:
        check(context, *predicates)
    except PolicyDenied as denial:
        return denial
    return None


BULK_IMPORT = all_of(
    require_tier_at_least(Tier.STANDARD),
    require_feature(FEATURE_BULK_USER_IMPORT),
)
AUDIT_LOGS = all_of(
    require_tier_at_least(Tier.STANDARD),
    require_feature(FEATURE_AUDIT_LOGS),
)
ADVANCED_AUTOMATION = require_feature(FEATURE_ADVANCED_AUTOMATION)


# ---------------------------------------------------------------------------
# Helpers bound to one request
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContextHelpers:
    """Tenancy questions downstream handlers may ask without re-deriving them."""

    principal: Principal
    context: RequestContext

    def belongs_to(self, tenant_id: str) -> bool:
        return membership.belongs_to_tenant(self.principal, tenant_id)

    def role_in(self, tenant_id: str) -> Role | None:
        return membership.role_in_tenant(self.principal, tenant_id)

    def is_standard(self) -> bool:
        """Tier of the resolved workspace; the guard bypass does not apply."""
        return self.context.tenant_tier == Tier.STANDARD

    def has_feature(self, name: str) -> bool:
        return first_denial(self.context, require_feature(name)) is None

    def can_add(self, resource: Resource | str) -> bool:
        return first_denial(self.context, require_under_limit(resource)) is None
