"""Request-scoped workspace context and guard dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from fastapi import Depends, HTTPException, Request

from workspacegate.config.logging import bind_workspace_context
from workspacegate.config.settings import get_settings
from workspacegate.models.domain import Principal, RequestContext
from workspacegate.tenancy.guard import ContextHelpers, Predicate, first_denial
from workspacegate.tenancy.resolver import ContextResolver
from workspacegate.web.dependencies import get_resolver

logger = structlog.get_logger(__name__)


async def get_principal(request: Request) -> Principal | None:
    """Principal placed on the request by the authentication layer, if any."""
    return getattr(request.state, "principal", None)


async def require_principal(
    principal: Principal | None = Depends(get_principal),
) -> Principal:
    if principal is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return principal


async def require_superuser(
    principal: Principal = Depends(require_principal),
) -> Principal:
    if not principal.is_superuser:
        raise HTTPException(status_code=403, detail="Superuser access required")
    return principal


async def get_request_context(
    request: Request,
    principal: Principal | None = Depends(get_principal),
    resolver: ContextResolver = Depends(get_resolver),
) -> RequestContext | None:
    """Resolve the workspace for this request; None for anonymous callers."""
    override = request.headers.get(get_settings().workspace_header)
    context = await resolver.resolve_and_commit(principal, override)
    if context is not None:
        bind_workspace_context(context)
        request.state.context = context
    return context


async def require_context(
    context: RequestContext | None = Depends(get_request_context),
) -> RequestContext:
    if context is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return context


async def get_context_helpers(
    principal: Principal = Depends(require_principal),
    context: RequestContext = Depends(require_context),
) -> ContextHelpers:
    return ContextHelpers(principal=principal, context=context)


def enforce(*predicates: Predicate) -> Callable[..., Awaitable[RequestContext]]:
    """Build a dependency that runs guard predicates after resolution."""

    async def guard(context: RequestContext = Depends(require_context)) -> RequestContext:
        denial = first_denial(context, *predicates)
        if denial is not None:
            logger.info(
                "policy_denied",
                error_code=str(denial.error_code),
                workspace_id=context.resolved_tenant_id,
                **denial.fields,
            )
            raise denial
        return context

    return guard
