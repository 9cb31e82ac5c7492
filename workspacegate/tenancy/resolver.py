"""Workspace context resolution.

Turns an authenticated principal plus an optional override (the
``X-Workspace-Id`` header) into an immutable ``RequestContext``.

Candidate precedence: override, then the current pointer, then the
legacy pointer (for superusers, or principals with no membership list
yet), then the first active membership, which is adopted. A current
pointer left on a revoked membership counts as unset. ``resolve`` itself
never writes; an adoption is reported on the returned ``Resolution`` and
applied by ``resolve_and_commit``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from workspacegate.exceptions import (
    ErrorCode,
    PrincipalNotFound,
    ResolutionRejected,
    StorageError,
    UnexpectedResolutionFailure,
)
from workspacegate.models.domain import Principal, RequestContext
from workspacegate.tenancy.membership import (
    belongs_to_tenant,
    find_membership,
    first_active_membership,
    member_tenant_ids,
    role_in_tenant,
)

if TYPE_CHECKING:
    from workspacegate.models.domain import TenantRecord
    from workspacegate.tenancy.stores import PrincipalStore, WorkspaceRegistry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of ``ContextResolver.resolve``.

    ``adopted_tenant_id`` is set when the principal had no current workspace
    and one was picked from its memberships; the caller owns persisting it.
    """

    context: RequestContext | None
    adopted_tenant_id: str | None = None

    @property
    def needs_persistence(self) -> bool:
        return self.adopted_tenant_id is not None


def _normalize_override(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _points_at_revoked_membership(principal: Principal, tenant_id: str) -> bool:
    """A current pointer left on an inactive entry is treated as unset."""
    if principal.is_superuser:
        return False
    membership = find_membership(principal, tenant_id)
    return membership is not None and not membership.is_active


def _reject(
    principal: Principal, code: ErrorCode, message: str, **fields: Any
) -> ResolutionRejected:
    logger.info(
        "workspace_resolution_rejected",
        principal_id=principal.id,
        error_code=str(code),
        **fields,
    )
    return ResolutionRejected(code, message, **fields)


class ContextResolver:
    """Resolves the workspace a principal is operating in for one request."""

    def __init__(
        self,
        workspaces: WorkspaceRegistry,
        principals: PrincipalStore | None = None,
        *,
        persist_adoption: bool = True,
    ) -> None:
        self._workspaces = workspaces
        self._principals = principals
        self._persist_adoption = persist_adoption

    async def resolve(
        self, principal: Principal | None, override_tenant_id: str | None = None
    ) -> Resolution:
        """Resolve without side effects.

        Raises ``ResolutionRejected`` for policy outcomes and
        ``UnexpectedResolutionFailure`` when the registry cannot be read.
        """
        if principal is None:
            return Resolution(context=None)

        override = _normalize_override(override_tenant_id)
        candidate, adopted = self._candidate_tenant_id(principal, override)

        if candidate is None:
            # Only superusers reach here; everyone else was rejected above.
            logger.debug("superuser_tenantless_context", principal_id=principal.id)
            return Resolution(
                context=RequestContext(
                    principal_id=principal.id,
                    resolved_tenant_id=None,
                    tenant_tier=None,
                    tenant_record=None,
                    is_superuser=True,
                    role_in_tenant=principal.role,
                    all_tenant_ids=(),
                )
            )

        if (
            override is not None
            and not principal.is_superuser
            and not belongs_to_tenant(principal, override)
        ):
            raise _reject(
                principal,
                ErrorCode.WORKSPACE_ACCESS_DENIED,
                "You do not have access to this workspace",
                workspaceId=override,
            )

        record = await self._load_tenant(principal, candidate)

        context = RequestContext(
            principal_id=principal.id,
            resolved_tenant_id=record.id,
            tenant_tier=record.tier,
            tenant_record=record,
            is_superuser=principal.is_superuser,
            role_in_tenant=role_in_tenant(principal, record.id) or principal.role,
            all_tenant_ids=member_tenant_ids(principal),
        )
        return Resolution(context=context, adopted_tenant_id=adopted)

    async def resolve_and_commit(
        self, principal: Principal | None, override_tenant_id: str | None = None
    ) -> RequestContext | None:
        """Resolve and persist a freshly adopted current workspace.

        The write is best effort: concurrent adoptions pick the same
        membership, so a lost or failed write is repaired by the next request.
        """
        resolution = await self.resolve(principal, override_tenant_id)
        if (
            resolution.needs_persistence
            and principal is not None
            and self._principals is not None
            and self._persist_adoption
        ):
            try:
                await self._principals.set_current_tenant(
                    principal.id, resolution.adopted_tenant_id
                )
                logger.info(
                    "current_workspace_adopted",
                    principal_id=principal.id,
                    workspace_id=resolution.adopted_tenant_id,
                )
            except (StorageError, PrincipalNotFound, OSError) as exc:
                logger.warning(
                    "current_workspace_adoption_not_persisted",
                    principal_id=principal.id,
                    workspace_id=resolution.adopted_tenant_id,
                    error=str(exc),
                )
        return resolution.context

    def _candidate_tenant_id(
        self, principal: Principal, override: str | None
    ) -> tuple[str | None, str | None]:
        """Return ``(candidate, adopted)``; adopted is set only for a new pick."""
        if override is not None:
            return override, None
        current = principal.current_tenant_id
        if current is not None and not _points_at_revoked_membership(principal, current):
            return current, None
        legacy = principal.legacy_tenant_id
        if legacy is not None and (not principal.memberships or principal.is_superuser):
            return legacy, None

        if principal.is_superuser:
            return None, None

        first = first_active_membership(principal)
        if first is not None:
            return first.tenant_id, first.tenant_id

        if principal.memberships:
            message = "User has no active workspaces. Please contact support."
        else:
            message = "User is not associated with any workspace. Please contact support."
        raise _reject(principal, ErrorCode.NO_WORKSPACE, message)

    async def _load_tenant(self, principal: Principal, tenant_id: str) -> TenantRecord:
        try:
            record = await self._workspaces.find_tenant_by_id(tenant_id)
        except (StorageError, OSError) as exc:
            logger.error(
                "workspace_lookup_failed",
                principal_id=principal.id,
                workspace_id=tenant_id,
                error=str(exc),
                exc_info=True,
            )
            raise UnexpectedResolutionFailure() from exc

        if record is None:
            raise _reject(
                principal,
                ErrorCode.INVALID_WORKSPACE,
                "Workspace not found",
                workspaceId=tenant_id,
            )
        if not record.is_active:
            raise _reject(
                principal,
                ErrorCode.WORKSPACE_INACTIVE,
                "Your workspace has been deactivated. Please contact support.",
                workspaceId=record.id,
            )
        return record
