"""Workspace registry: in-memory and PostgreSQL-backed implementations."""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from workspacegate.exceptions import StorageError, WorkspaceNameTaken
from workspacegate.models.database import Workspace
from workspacegate.models.domain import TenantLimits, TenantRecord, TenantUsage, utc_now
from workspacegate.tenancy.stores import WorkspaceRegistry
from workspacegate.tenancy.tiers import get_tier_defaults
from workspacegate.types import Tier

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)


def _to_record(row: Workspace) -> TenantRecord:
    return TenantRecord(
        id=row.id,
        name=row.name,
        tier=Tier(row.tier),
        is_active=row.is_active,
        features=dict(row.features or {}),
        limits=TenantLimits(
            max_users=row.max_users,
            max_tasks=row.max_tasks,
            max_teams=row.max_teams,
        ),
        usage=TenantUsage(
            user_count=row.user_count,
            task_count=row.task_count,
            team_count=row.team_count,
        ),
    )


class DatabaseWorkspaceRepository(WorkspaceRegistry):
    """Stores workspaces in PostgreSQL via the Workspace model."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_tenant_by_id(self, tenant_id: str) -> TenantRecord | None:
        try:
            async with AsyncSession(self._engine) as session:
                row = await session.get(Workspace, tenant_id)
                return _to_record(row) if row else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Workspace lookup failed for {tenant_id}") from exc

    async def find_tenant_by_name(self, name: str) -> TenantRecord | None:
        try:
            async with AsyncSession(self._engine) as session:
                stmt = select(Workspace).where(col(Workspace.name) == name)
                result = await session.execute(stmt)
                row = result.scalars().first()
                return _to_record(row) if row else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Workspace lookup failed for name {name!r}") from exc

    async def list_tenants(self, *, active_only: bool = False) -> list[TenantRecord]:
        try:
            async with AsyncSession(self._engine) as session:
                stmt = select(Workspace).order_by(col(Workspace.created_at))
                if active_only:
                    stmt = stmt.where(col(Workspace.is_active).is_(True))
                result = await session.execute(stmt)
                return [_to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise StorageError("Workspace listing failed") from exc

    async def create_tenant(self, name: str, tier: Tier) -> TenantRecord:
        defaults = get_tier_defaults(tier)
        row = Workspace(
            name=name,
            tier=str(tier),
            features=defaults.features,
            max_users=defaults.limits.max_users,
            max_tasks=defaults.limits.max_tasks,
            max_teams=defaults.limits.max_teams,
        )
        try:
            async with AsyncSession(self._engine) as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        except IntegrityError as exc:
            raise WorkspaceNameTaken(name) from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Workspace creation failed for {name!r}") from exc

        logger.info("workspace_created", workspace_id=row.id, name=name, tier=str(tier))
        return _to_record(row)

    async def set_active(self, tenant_id: str, is_active: bool) -> TenantRecord | None:
        try:
            async with AsyncSession(self._engine) as session:
                row = await session.get(Workspace, tenant_id)
                if row is None:
                    return None
                row.is_active = is_active
                row.updated_at = utc_now()
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return _to_record(row)
        except SQLAlchemyError as exc:
            raise StorageError(f"Workspace status update failed for {tenant_id}") from exc


class InMemoryWorkspaceRepository(WorkspaceRegistry):
    """In-memory fallback for dev/testing without a database."""

    def __init__(self, records: list[TenantRecord] | None = None) -> None:
        self._records: dict[str, TenantRecord] = {r.id: r for r in records or []}

    def put(self, record: TenantRecord) -> TenantRecord:
        self._records[record.id] = record
        return record

    async def find_tenant_by_id(self, tenant_id: str) -> TenantRecord | None:
        return self._records.get(tenant_id)

    async def find_tenant_by_name(self, name: str) -> TenantRecord | None:
        for record in self._records.values():
            if record.name == name:
                return record
        return None

    async def list_tenants(self, *, active_only: bool = False) -> list[TenantRecord]:
        return [r for r in self._records.values() if r.is_active or not active_only]

    async def create_tenant(self, name: str, tier: Tier) -> TenantRecord:
        if await self.find_tenant_by_name(name) is not None:
            raise WorkspaceNameTaken(name)
        defaults = get_tier_defaults(tier)
        record = self.put(
            TenantRecord(
                id=str(uuid.uuid4()),
                name=name,
                tier=Tier(tier),
                features=defaults.features,
                limits=defaults.limits,
            )
        )
        logger.info("workspace_created", workspace_id=record.id, name=name, tier=str(tier))
        return record

    async def set_active(self, tenant_id: str, is_active: bool) -> TenantRecord | None:
        record = self._records.get(tenant_id)
        if record is None:
            return None
        return self.put(replace(record, is_active=is_active))
