"""Abstract store interfaces consumed by the resolver and workspace service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workspacegate.models.domain import Principal, TenantRecord
    from workspacegate.types import Role, Tier


class WorkspaceRegistry(ABC):
    """Durable store of workspace records."""

    @abstractmethod
    async def find_tenant_by_id(self, tenant_id: str) -> TenantRecord | None:
        """Return a read projection of the workspace, or None when unknown."""

    @abstractmethod
    async def find_tenant_by_name(self, name: str) -> TenantRecord | None:
        """Return the workspace registered under ``name``."""

    @abstractmethod
    async def list_tenants(self, *, active_only: bool = False) -> list[TenantRecord]:
        """Return all workspaces, oldest first."""

    @abstractmethod
    async def create_tenant(self, name: str, tier: Tier) -> TenantRecord:
        """Register a workspace with the tier's default features and limits."""

    @abstractmethod
    async def set_active(self, tenant_id: str, is_active: bool) -> TenantRecord | None:
        """Toggle activation; returns None when the workspace does not exist."""


class PrincipalStore(ABC):
    """Durable store of principals and their memberships."""

    @abstractmethod
    async def get(self, principal_id: str) -> Principal | None:
        """Return the principal snapshot, or None when unknown."""

    @abstractmethod
    async def set_current_tenant(self, principal_id: str, tenant_id: str | None) -> None:
        """Persist the current-workspace pointer. Idempotent."""

    @abstractmethod
    async def add_membership(self, principal_id: str, tenant_id: str, role: Role) -> Principal:
        """Add or re-activate a membership."""

    @abstractmethod
    async def revoke_membership(self, principal_id: str, tenant_id: str) -> Principal:
        """Soft-revoke a membership."""

    @abstractmethod
    async def backfill_legacy_memberships(self) -> int:
        """Convert every legacy-only principal to the membership list; returns the count."""
