"""Current workspace context API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from workspacegate.models.api import ContextResponse, QuotaResponse
from workspacegate.models.domain import RequestContext
from workspacegate.tenancy.guard import ContextHelpers, quota_status
from workspacegate.types import Resource
from workspacegate.web.context import get_context_helpers, require_context

router = APIRouter(prefix="/api/context", tags=["context"])


@router.get("", response_model=ContextResponse)
async def current_context(
    context: RequestContext = Depends(require_context),
) -> ContextResponse:
    return ContextResponse.from_context(context)


@router.get("/limits/{resource}", response_model=QuotaResponse)
async def resource_quota(
    resource: Resource,
    helpers: ContextHelpers = Depends(get_context_helpers),
) -> QuotaResponse:
    """Report whether one more ``resource`` may be created right now."""
    record = helpers.context.tenant_record
    if record is None:
        return QuotaResponse(resource=resource, limit=None, current=None, allowed=True)
    status = quota_status(record, resource)
    return QuotaResponse(
        resource=resource,
        limit=status.limit,
        current=status.current,
        allowed=helpers.can_add(resource),
    )
