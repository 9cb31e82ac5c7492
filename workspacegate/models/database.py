"""SQLModel database table models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from workspacegate.models.domain import UNLIMITED, utc_now


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Tenant registry
# ---------------------------------------------------------------------------


class Workspace(SQLModel, table=True):
    __tablename__ = "workspaces"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=100)
    tier: str = Field(default="COMMUNITY", index=True)  # STANDARD | COMMUNITY
    is_active: bool = Field(default=True)
    features: dict[str, bool] = Field(default_factory=dict, sa_column=Column(JSON))

    max_users: int = Field(default=UNLIMITED)
    max_tasks: int = Field(default=UNLIMITED)
    max_teams: int = Field(default=UNLIMITED)

    # Maintained by downstream services; read-only here
    user_count: int = Field(default=0)
    task_count: int = Field(default=0)
    team_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Principals and memberships
# ---------------------------------------------------------------------------


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    email: str = Field(index=True)
    full_name: str = ""
    role: str = Field(default="member")
    # Pre-membership schema pointer, kept for unmigrated principals
    legacy_workspace_id: str | None = Field(default=None, foreign_key="workspaces.id", index=True)
    current_workspace_id: str | None = Field(default=None, foreign_key="workspaces.id", index=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class WorkspaceMembership(SQLModel, table=True):
    __tablename__ = "workspace_memberships"
    __table_args__ = (UniqueConstraint("user_id", "workspace_id"),)

    # Autoincrement id doubles as the stable membership order
    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    workspace_id: str = Field(foreign_key="workspaces.id", index=True)
    role: str = Field(default="member")
    is_active: bool = Field(default=True)
    joined_at: datetime = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    workspace_id: str | None = Field(default=None, index=True)
    user_id: str = Field(index=True)
    action: str = Field(index=True)
    resource_type: str = ""
    resource_id: str = ""
    details_json: str = "{}"
    request_id: str = ""
    created_at: datetime = Field(default_factory=utc_now)
