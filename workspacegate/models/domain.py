"""Immutable domain snapshots shared by the resolver, guards and stores."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType

from workspacegate.types import Resource, Role, Tier

UNLIMITED = -1


def utc_now() -> datetime:
    """Return current UTC time as naive datetime for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass(frozen=True, slots=True)
class Membership:
    """A principal's relationship to one workspace."""

    tenant_id: str
    role: Role
    is_active: bool = True
    joined_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated user as seen by the resolver.

    Carries both the legacy single-workspace pointer and the ordered
    membership list. ``memberships`` order is the adoption order.
    """

    id: str
    email: str
    role: Role = Role.MEMBER
    full_name: str = ""
    legacy_tenant_id: str | None = None
    current_tenant_id: str | None = None
    memberships: tuple[Membership, ...] = ()

    @property
    def is_superuser(self) -> bool:
        return self.role == Role.SUPERUSER


@dataclass(frozen=True, slots=True)
class TenantLimits:
    max_users: int = UNLIMITED
    max_tasks: int = UNLIMITED
    max_teams: int = UNLIMITED

    def for_resource(self, resource: Resource) -> int:
        return {
            Resource.USERS: self.max_users,
            Resource.TASKS: self.max_tasks,
            Resource.TEAMS: self.max_teams,
        }[resource]


@dataclass(frozen=True, slots=True)
class TenantUsage:
    user_count: int = 0
    task_count: int = 0
    team_count: int = 0

    def for_resource(self, resource: Resource) -> int:
        return {
            Resource.USERS: self.user_count,
            Resource.TASKS: self.task_count,
            Resource.TEAMS: self.team_count,
        }[resource]


@dataclass(frozen=True, slots=True)
class TenantRecord:
    """Read projection of a workspace, frozen at resolution time."""

    id: str
    name: str
    tier: Tier
    is_active: bool = True
    features: Mapping[str, bool] = field(default_factory=dict)
    limits: TenantLimits = field(default_factory=TenantLimits)
    usage: TenantUsage = field(default_factory=TenantUsage)

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    def has_feature(self, name: str) -> bool:
        return self.features.get(name) is True


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-request outcome of workspace resolution."""

    principal_id: str
    resolved_tenant_id: str | None
    tenant_tier: Tier | None
    tenant_record: TenantRecord | None
    is_superuser: bool
    role_in_tenant: Role
    all_tenant_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.resolved_tenant_id is None and not self.is_superuser:
            msg = "A context without a workspace is only valid for a superuser"
            raise ValueError(msg)

    @property
    def is_tenantless(self) -> bool:
        return self.resolved_tenant_id is None
