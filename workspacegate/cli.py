"""CLI entry point for the legacy membership backfill."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from workspacegate.config.logging import setup_logging
from workspacegate.storage.database import get_engine, init_db
from workspacegate.storage.repositories.principals import DatabasePrincipalRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)


async def backfill(engine: AsyncEngine) -> int:
    """Give every unmigrated principal a membership for its legacy workspace."""
    await init_db(engine)
    migrated = await DatabasePrincipalRepository(engine).backfill_legacy_memberships()
    logger.info("legacy_backfill_complete", migrated=migrated)
    return migrated


async def _run() -> None:
    engine = get_engine()
    try:
        await backfill(engine)
    finally:
        await engine.dispose()


def main() -> None:
    """Run the legacy membership backfill once."""
    setup_logging(log_level="INFO", json_output=True)
    asyncio.run(_run())


if __name__ == "__main__":
    main()
