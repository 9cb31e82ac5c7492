"""Membership reconciliation between the legacy pointer and the membership list.

Every question of the form "is this principal part of workspace X, and as
what?" is answered here. Callers must not compare ``legacy_tenant_id`` or
walk ``memberships`` themselves.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from workspacegate.models.domain import Membership, Principal, utc_now
from workspacegate.types import Role


def find_membership(principal: Principal, tenant_id: str) -> Membership | None:
    """Return the membership entry for ``tenant_id``, active or not."""
    for membership in principal.memberships:
        if membership.tenant_id == tenant_id:
            return membership
    return None


def active_memberships(principal: Principal) -> tuple[Membership, ...]:
    return tuple(m for m in principal.memberships if m.is_active)


def first_active_membership(principal: Principal) -> Membership | None:
    """First active entry in list order; the deterministic adoption choice."""
    for membership in principal.memberships:
        if membership.is_active:
            return membership
    return None


def belongs_to_tenant(principal: Principal, tenant_id: str) -> bool:
    """Superuser, active membership, or legacy pointer for unmigrated principals.

    Once a membership list exists the legacy pointer no longer grants access,
    so revoking the migrated entry revokes the workspace.
    """
    if principal.is_superuser:
        return True
    if not principal.memberships:
        return principal.legacy_tenant_id == tenant_id
    membership = find_membership(principal, tenant_id)
    return membership is not None and membership.is_active


def role_in_tenant(principal: Principal, tenant_id: str) -> Role | None:
    """Membership role, else the global role, else None when unrelated."""
    membership = find_membership(principal, tenant_id)
    if membership is not None and membership.is_active:
        return membership.role
    if belongs_to_tenant(principal, tenant_id):
        return principal.role
    return None


def member_tenant_ids(principal: Principal) -> tuple[str, ...]:
    """Every workspace the principal can aggregate over.

    The membership list wins when present; legacy principals get their
    single pointer; pure superusers get nothing.
    """
    if principal.memberships:
        return tuple(m.tenant_id for m in active_memberships(principal))
    if principal.legacy_tenant_id is not None:
        return (principal.legacy_tenant_id,)
    return ()


# ---------------------------------------------------------------------------
# Membership management (pure; stores persist the returned snapshot)
# ---------------------------------------------------------------------------


def add_membership(principal: Principal, tenant_id: str, role: Role) -> Principal:
    """Add or re-activate a membership; claims the current pointer if unset."""
    existing = find_membership(principal, tenant_id)
    if existing is not None:
        memberships = tuple(
            replace(m, role=role, is_active=True) if m.tenant_id == tenant_id else m
            for m in principal.memberships
        )
    else:
        memberships = (
            *principal.memberships,
            Membership(tenant_id=tenant_id, role=role, is_active=True, joined_at=utc_now()),
        )

    current = principal.current_tenant_id or tenant_id
    return replace(principal, memberships=memberships, current_tenant_id=current)


def revoke_membership(principal: Principal, tenant_id: str) -> Principal:
    """Soft-revoke a membership and move the current pointer off it if needed."""
    memberships = tuple(
        replace(m, is_active=False) if m.tenant_id == tenant_id else m
        for m in principal.memberships
    )
    updated = replace(principal, memberships=memberships)

    if principal.current_tenant_id == tenant_id:
        fallback = first_active_membership(updated)
        updated = replace(
            updated, current_tenant_id=fallback.tenant_id if fallback else None
        )
    return updated


def migrate_legacy_membership(
    principal: Principal, joined_at: datetime | None = None
) -> Principal:
    """Convert a legacy-only principal to a one-entry membership list.

    Principals that already have memberships, or have no legacy pointer,
    are returned unchanged.
    """
    if principal.memberships or principal.legacy_tenant_id is None:
        return principal

    membership = Membership(
        tenant_id=principal.legacy_tenant_id,
        role=principal.role,
        is_active=True,
        joined_at=joined_at or utc_now(),
    )
    return replace(
        principal,
        memberships=(membership,),
        current_tenant_id=principal.legacy_tenant_id,
    )
