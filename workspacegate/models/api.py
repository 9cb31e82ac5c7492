"""API request/response schemas for FastAPI endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from workspacegate.models.domain import RequestContext, TenantRecord
from workspacegate.types import Resource, Role, Tier


class WorkspaceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    tier: Tier = Tier.COMMUNITY
    owner_id: str | None = None


class WorkspaceStatusUpdate(BaseModel):
    is_active: bool


class WorkspaceSwitch(BaseModel):
    workspace_id: str = Field(min_length=1)


class LimitsResponse(BaseModel):
    max_users: int
    max_tasks: int
    max_teams: int


class UsageResponse(BaseModel):
    user_count: int
    task_count: int
    team_count: int


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    tier: Tier
    is_active: bool
    features: dict[str, bool]
    limits: LimitsResponse
    usage: UsageResponse

    @classmethod
    def from_record(cls, record: TenantRecord) -> WorkspaceResponse:
        return cls(
            id=record.id,
            name=record.name,
            tier=record.tier,
            is_active=record.is_active,
            features=dict(record.features),
            limits=LimitsResponse(
                max_users=record.limits.max_users,
                max_tasks=record.limits.max_tasks,
                max_teams=record.limits.max_teams,
            ),
            usage=UsageResponse(
                user_count=record.usage.user_count,
                task_count=record.usage.task_count,
                team_count=record.usage.team_count,
            ),
        )


class WorkspaceAccessResponse(BaseModel):
    workspace: WorkspaceResponse
    role: Role


class ContextResponse(BaseModel):
    principal_id: str
    workspace_id: str | None
    workspace_tier: Tier | None
    workspace_name: str | None
    is_superuser: bool
    role: Role
    all_workspace_ids: list[str]

    @classmethod
    def from_context(cls, context: RequestContext) -> ContextResponse:
        record = context.tenant_record
        return cls(
            principal_id=context.principal_id,
            workspace_id=context.resolved_tenant_id,
            workspace_tier=context.tenant_tier,
            workspace_name=record.name if record else None,
            is_superuser=context.is_superuser,
            role=context.role_in_tenant,
            all_workspace_ids=list(context.all_tenant_ids),
        )


class QuotaResponse(BaseModel):
    resource: Resource
    limit: int | None
    current: int | None
    allowed: bool
