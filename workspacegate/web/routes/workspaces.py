"""Workspace listing, switching and administration API routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from workspacegate.models.api import (
    WorkspaceAccessResponse,
    WorkspaceCreate,
    WorkspaceResponse,
    WorkspaceStatusUpdate,
    WorkspaceSwitch,
)
from workspacegate.models.domain import Principal
from workspacegate.tenancy.service import WorkspaceAccess, WorkspaceService
from workspacegate.web.context import require_principal, require_superuser
from workspacegate.web.dependencies import get_workspace_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


def _access_response(access: WorkspaceAccess) -> WorkspaceAccessResponse:
    return WorkspaceAccessResponse(
        workspace=WorkspaceResponse.from_record(access.workspace),
        role=access.role,
    )


@router.get("/mine", response_model=list[WorkspaceAccessResponse])
async def my_workspaces(
    principal: Principal = Depends(require_principal),
    service: WorkspaceService = Depends(get_workspace_service),
) -> list[WorkspaceAccessResponse]:
    return [_access_response(a) for a in await service.list_workspaces(principal)]


@router.post("/switch", response_model=WorkspaceAccessResponse)
async def switch_workspace(
    body: WorkspaceSwitch,
    principal: Principal = Depends(require_principal),
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceAccessResponse:
    return _access_response(await service.switch_workspace(principal, body.workspace_id))


@router.post("", status_code=201, response_model=WorkspaceResponse)
async def create_workspace(
    body: WorkspaceCreate,
    actor: Principal = Depends(require_superuser),
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    record = await service.create_workspace(actor, body.name, body.tier, owner_id=body.owner_id)
    return WorkspaceResponse.from_record(record)


@router.patch("/{workspace_id}/status", response_model=WorkspaceResponse)
async def set_workspace_status(
    workspace_id: str,
    body: WorkspaceStatusUpdate,
    actor: Principal = Depends(require_superuser),
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    record = await service.set_workspace_active(actor, workspace_id, body.is_active)
    if not record.is_active:
        logger.info("workspace_sessions_must_relogin", workspace_id=workspace_id)
    return WorkspaceResponse.from_record(record)
