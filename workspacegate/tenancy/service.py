"""Workspace administration and explicit switching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from workspacegate.exceptions import (
    ErrorCode,
    PrincipalNotFound,
    ResolutionRejected,
    WorkspaceNotFound,
)
from workspacegate.tenancy.membership import belongs_to_tenant, role_in_tenant
from workspacegate.types import Role, Tier

if TYPE_CHECKING:
    from workspacegate.audit.logger import AuditLogger
    from workspacegate.models.domain import Principal, TenantRecord
    from workspacegate.tenancy.stores import PrincipalStore, WorkspaceRegistry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class WorkspaceAccess:
    """A workspace together with the role the principal holds in it."""

    workspace: TenantRecord
    role: Role


class WorkspaceService:
    def __init__(
        self,
        workspaces: WorkspaceRegistry,
        principals: PrincipalStore,
        audit: AuditLogger | None = None,
    ) -> None:
        self._workspaces = workspaces
        self._principals = principals
        self._audit = audit

    async def switch_workspace(self, principal: Principal, tenant_id: str) -> WorkspaceAccess:
        """Persistently move ``principal`` into ``tenant_id``."""
        record = await self._workspaces.find_tenant_by_id(tenant_id)
        if record is None:
            raise ResolutionRejected(
                ErrorCode.INVALID_WORKSPACE, "Workspace not found", workspaceId=tenant_id
            )
        if not belongs_to_tenant(principal, tenant_id):
            logger.info(
                "workspace_switch_denied", principal_id=principal.id, workspace_id=tenant_id
            )
            raise ResolutionRejected(
                ErrorCode.WORKSPACE_ACCESS_DENIED,
                "You do not have access to this workspace",
                workspaceId=tenant_id,
            )
        if not record.is_active:
            raise ResolutionRejected(
                ErrorCode.WORKSPACE_INACTIVE,
                "This workspace has been deactivated. Please contact support.",
                workspaceId=tenant_id,
            )

        previous = principal.current_tenant_id
        await self._principals.set_current_tenant(principal.id, tenant_id)
        logger.info(
            "workspace_switched",
            principal_id=principal.id,
            from_workspace=previous,
            to_workspace=tenant_id,
        )
        if self._audit:
            await self._audit.log(
                user_id=principal.id,
                action="switch_workspace",
                workspace_id=tenant_id,
                resource_id=tenant_id,
                details={"from_workspace": previous, "to_workspace": tenant_id},
            )
        return WorkspaceAccess(
            workspace=record,
            role=role_in_tenant(principal, tenant_id) or principal.role,
        )

    async def list_workspaces(self, principal: Principal) -> list[WorkspaceAccess]:
        """Active workspaces the principal can enter; every one for a superuser."""
        records = await self._workspaces.list_tenants(active_only=True)
        if principal.is_superuser:
            return [WorkspaceAccess(workspace=r, role=Role.SUPERUSER) for r in records]

        accessible = []
        for record in records:
            role = role_in_tenant(principal, record.id)
            if role is not None:
                accessible.append(WorkspaceAccess(workspace=record, role=role))
        return accessible

    async def create_workspace(
        self,
        actor: Principal,
        name: str,
        tier: Tier,
        owner_id: str | None = None,
    ) -> TenantRecord:
        """Register a workspace with tier defaults; optionally seat its owner."""
        if owner_id is not None and await self._principals.get(owner_id) is None:
            raise PrincipalNotFound(owner_id)
        record = await self._workspaces.create_tenant(name, tier)
        if owner_id is not None:
            await self._principals.add_membership(owner_id, record.id, Role.TENANT_OWNER)
            logger.info("workspace_owner_assigned", workspace_id=record.id, owner_id=owner_id)

        if self._audit:
            await self._audit.log(
                user_id=actor.id,
                action="create",
                resource_id=record.id,
                details={"name": name, "tier": str(tier), "owner_id": owner_id},
            )
        return record

    async def set_workspace_active(
        self, actor: Principal, tenant_id: str, is_active: bool
    ) -> TenantRecord:
        record = await self._workspaces.set_active(tenant_id, is_active)
        if record is None:
            raise WorkspaceNotFound(tenant_id)

        logger.info(
            "workspace_status_changed",
            workspace_id=tenant_id,
            is_active=is_active,
            actor_id=actor.id,
        )
        if self._audit:
            await self._audit.log(
                user_id=actor.id,
                action="status_change",
                resource_id=tenant_id,
                details={"is_active": is_active},
            )
        return record
