"""Principal store: in-memory and PostgreSQL-backed implementations."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from workspacegate.exceptions import PrincipalNotFound, StorageError
from workspacegate.models.database import User, WorkspaceMembership
from workspacegate.models.domain import Membership, Principal, utc_now
from workspacegate.tenancy import membership as membership_rules
from workspacegate.tenancy.stores import PrincipalStore
from workspacegate.types import Role

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)


def _to_principal(user: User, rows: list[WorkspaceMembership]) -> Principal:
    return Principal(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=Role(user.role),
        legacy_tenant_id=user.legacy_workspace_id,
        current_tenant_id=user.current_workspace_id,
        memberships=tuple(
            Membership(
                tenant_id=row.workspace_id,
                role=Role(row.role),
                is_active=row.is_active,
                joined_at=row.joined_at,
            )
            for row in rows
        ),
    )


class DatabasePrincipalRepository(PrincipalStore):
    """PostgreSQL-backed principal store."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def create(
        self,
        email: str,
        role: Role = Role.MEMBER,
        full_name: str = "",
        legacy_tenant_id: str | None = None,
    ) -> Principal:
        try:
            async with AsyncSession(self._engine) as session:
                user = User(
                    email=email,
                    full_name=full_name or email,
                    role=str(role),
                    legacy_workspace_id=legacy_tenant_id,
                )
                session.add(user)
                await session.commit()
                await session.refresh(user)
        except SQLAlchemyError as exc:
            raise StorageError(f"Principal creation failed for {email}") from exc

        logger.info("principal_created", principal_id=user.id, role=str(role))
        return _to_principal(user, [])

    async def get(self, principal_id: str) -> Principal | None:
        try:
            async with AsyncSession(self._engine) as session:
                return await self._load(session, principal_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Principal lookup failed for {principal_id}") from exc

    async def set_current_tenant(self, principal_id: str, tenant_id: str | None) -> None:
        try:
            async with AsyncSession(self._engine) as session:
                user = await session.get(User, principal_id)
                if user is None:
                    raise PrincipalNotFound(principal_id)
                if user.current_workspace_id == tenant_id:
                    return
                user.current_workspace_id = tenant_id
                user.updated_at = utc_now()
                session.add(user)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Current workspace update failed for {principal_id}") from exc

    async def add_membership(self, principal_id: str, tenant_id: str, role: Role) -> Principal:
        return await self._apply(
            principal_id, lambda p: membership_rules.add_membership(p, tenant_id, role)
        )

    async def revoke_membership(self, principal_id: str, tenant_id: str) -> Principal:
        return await self._apply(
            principal_id, lambda p: membership_rules.revoke_membership(p, tenant_id)
        )

    async def backfill_legacy_memberships(self) -> int:
        try:
            async with AsyncSession(self._engine) as session:
                migrated_ids = select(WorkspaceMembership.user_id).distinct()
                stmt = select(User).where(
                    col(User.legacy_workspace_id).is_not(None),
                    col(User.id).not_in(migrated_ids),
                )
                result = await session.execute(stmt)
                users = result.scalars().all()

                for user in users:
                    principal = membership_rules.migrate_legacy_membership(
                        _to_principal(user, []), joined_at=user.created_at
                    )
                    await self._store(session, user, principal)
                    logger.info(
                        "legacy_membership_migrated",
                        principal_id=user.id,
                        workspace_id=principal.legacy_tenant_id,
                    )
                await session.commit()
                return len(users)
        except SQLAlchemyError as exc:
            raise StorageError("Legacy membership backfill failed") from exc

    async def _apply(
        self, principal_id: str, change: Callable[[Principal], Principal]
    ) -> Principal:
        try:
            async with AsyncSession(self._engine) as session:
                user = await session.get(User, principal_id)
                principal = await self._load(session, principal_id)
                if user is None or principal is None:
                    raise PrincipalNotFound(principal_id)
                updated = change(principal)
                await self._store(session, user, updated)
                await session.commit()
                return updated
        except SQLAlchemyError as exc:
            raise StorageError(f"Membership update failed for {principal_id}") from exc

    async def _load(self, session: AsyncSession, principal_id: str) -> Principal | None:
        user = await session.get(User, principal_id)
        if user is None:
            return None
        stmt = (
            select(WorkspaceMembership)
            .where(col(WorkspaceMembership.user_id) == principal_id)
            .order_by(col(WorkspaceMembership.id))
        )
        result = await session.execute(stmt)
        return _to_principal(user, list(result.scalars().all()))

    async def _store(self, session: AsyncSession, user: User, principal: Principal) -> None:
        """Write the membership list and current pointer of ``principal``."""
        stmt = select(WorkspaceMembership).where(col(WorkspaceMembership.user_id) == user.id)
        result = await session.execute(stmt)
        rows = {row.workspace_id: row for row in result.scalars().all()}

        for entry in principal.memberships:
            row = rows.get(entry.tenant_id)
            if row is None:
                row = WorkspaceMembership(
                    user_id=user.id,
                    workspace_id=entry.tenant_id,
                    joined_at=entry.joined_at,
                )
            row.role = str(entry.role)
            row.is_active = entry.is_active
            session.add(row)

        user.current_workspace_id = principal.current_tenant_id
        user.updated_at = utc_now()
        session.add(user)


class InMemoryPrincipalRepository(PrincipalStore):
    """In-memory fallback for dev/testing without a database."""

    def __init__(self, principals: list[Principal] | None = None) -> None:
        self._principals: dict[str, Principal] = {p.id: p for p in principals or []}
        self.writes = 0

    def put(self, principal: Principal) -> Principal:
        self._principals[principal.id] = principal
        return principal

    async def get(self, principal_id: str) -> Principal | None:
        return self._principals.get(principal_id)

    async def set_current_tenant(self, principal_id: str, tenant_id: str | None) -> None:
        principal = self._require(principal_id)
        if principal.current_tenant_id == tenant_id:
            return
        self.put(replace(principal, current_tenant_id=tenant_id))
        self.writes += 1

    async def add_membership(self, principal_id: str, tenant_id: str, role: Role) -> Principal:
        principal = self._require(principal_id)
        self.writes += 1
        return self.put(membership_rules.add_membership(principal, tenant_id, role))

    async def revoke_membership(self, principal_id: str, tenant_id: str) -> Principal:
        principal = self._require(principal_id)
        self.writes += 1
        return self.put(membership_rules.revoke_membership(principal, tenant_id))

    async def backfill_legacy_memberships(self) -> int:
        migrated = 0
        for principal in list(self._principals.values()):
            updated = membership_rules.migrate_legacy_membership(principal)
            if updated is not principal:
                self.put(updated)
                migrated += 1
        self.writes += migrated
        return migrated

    def _require(self, principal_id: str) -> Principal:
        principal = self._principals.get(principal_id)
        if principal is None:
            raise PrincipalNotFound(principal_id)
        return principal
