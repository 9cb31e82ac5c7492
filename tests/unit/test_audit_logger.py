"""Unit tests for the audit logger (DB-backed with SQLite)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import structlog
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from workspacegate.audit.logger import AuditLogger, _sanitize_details, get_audit_logger
from workspacegate.models.database import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


async def _entries(engine: AsyncEngine) -> list[AuditLog]:
    async with AsyncSession(engine) as session:
        result = await session.execute(select(AuditLog))
        return list(result.scalars().all())


@pytest.mark.unit
class TestSanitizeDetails:
    def test_strips_sensitive_fields(self) -> None:
        encoded = _sanitize_details({"name": "Acme", "Token": "t", "password": "p"})
        assert json.loads(encoded) == {"name": "Acme"}

    def test_caps_size(self) -> None:
        encoded = _sanitize_details({"blob": "x" * 50_000})
        assert len(encoded) == 10_240


@pytest.mark.unit
class TestAuditLogger:
    async def test_writes_entry(self, async_engine: AsyncEngine) -> None:
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="req-1")
        try:
            await AuditLogger(async_engine).log(
                user_id="root",
                action="status_change",
                resource_id="w1",
                details={"is_active": False, "secret": "hidden"},
            )
        finally:
            structlog.contextvars.clear_contextvars()

        entries = await _entries(async_engine)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.action == "status_change"
        assert entry.resource_type == "workspace"
        assert entry.resource_id == "w1"
        assert entry.request_id == "req-1"
        assert json.loads(entry.details_json) == {"is_active": False}

    async def test_failure_is_swallowed(self) -> None:
        engine = create_async_engine("sqlite+aiosqlite:///:memory:")
        try:
            await AuditLogger(engine).log(user_id="root", action="create")
        finally:
            await engine.dispose()

    def test_disabled_without_database(self) -> None:
        assert get_audit_logger() is None
