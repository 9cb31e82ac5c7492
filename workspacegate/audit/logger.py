"""Audit logger: immutable, insert-only trail of workspace administration.

Uses its own DB session so audit entries survive caller rollbacks.
Details JSON is sanitized (sensitive fields stripped, 10KB max).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from sqlmodel.ext.asyncio.session import AsyncSession

from workspacegate.models.database import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)

_SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "password_hash",
        "secret",
        "token",
        "api_key",
        "authorization",
        "cookie",
        "session",
    }
)

_MAX_DETAILS_BYTES = 10_240  # 10KB


def _sanitize_details(details: dict[str, Any]) -> str:
    sanitized = {k: v for k, v in details.items() if k.lower() not in _SENSITIVE_FIELDS}
    encoded = json.dumps(sanitized, default=str)
    if len(encoded) > _MAX_DETAILS_BYTES:
        encoded = encoded[:_MAX_DETAILS_BYTES]
    return encoded


def _current_request_id() -> str:
    return str(structlog.contextvars.get_contextvars().get("request_id", ""))


class AuditLogger:
    """Insert-only audit logger with its own DB session."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def log(
        self,
        *,
        user_id: str,
        action: str,
        workspace_id: str | None = None,
        resource_type: str = "workspace",
        resource_id: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Write an audit log entry."""
        entry = AuditLog(
            workspace_id=workspace_id,
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details_json=_sanitize_details(details or {}),
            request_id=_current_request_id(),
        )
        try:
            async with AsyncSession(self._engine) as session:
                session.add(entry)
                await session.commit()
        except Exception:
            # Audit must never break the request; log and continue
            logger.exception("audit_log_failed", action=action, workspace_id=workspace_id)


def get_audit_logger() -> AuditLogger | None:
    """Return a DB-backed audit logger, or None when USE_DATABASE=false."""
    from workspacegate.config.settings import get_settings

    if not get_settings().use_database:
        return None

    from workspacegate.storage.database import get_engine

    return AuditLogger(get_engine())
