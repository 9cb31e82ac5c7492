"""Shared test fixtures."""

from __future__ import annotations

import pytest
from factories import make_record
from sqlalchemy.ext.asyncio import create_async_engine

from workspacegate.config.settings import get_settings
from workspacegate.storage.database import init_db
from workspacegate.storage.repositories.principals import InMemoryPrincipalRepository
from workspacegate.storage.repositories.workspaces import InMemoryWorkspaceRepository
from workspacegate.web.dependencies import get_principal_store, get_workspace_registry


@pytest.fixture(autouse=True)
def _reset_caches():
    """Settings and store singletons are rebuilt for every test."""
    get_settings.cache_clear()
    get_workspace_registry.cache_clear()
    get_principal_store.cache_clear()
    yield
    get_settings.cache_clear()
    get_workspace_registry.cache_clear()
    get_principal_store.cache_clear()


@pytest.fixture()
async def async_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def workspaces() -> InMemoryWorkspaceRepository:
    return InMemoryWorkspaceRepository(
        [
            make_record("A"),
            make_record("B"),
            make_record("C"),
            make_record("D", is_active=False),
        ]
    )


@pytest.fixture()
def principals() -> InMemoryPrincipalRepository:
    return InMemoryPrincipalRepository()
