"""Fixtures for exercising the app with an injected principal."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from factories import make_record
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from workspacegate.models.domain import Principal, TenantUsage
from workspacegate.storage.repositories.principals import InMemoryPrincipalRepository
from workspacegate.storage.repositories.workspaces import InMemoryWorkspaceRepository
from workspacegate.types import Tier
from workspacegate.web.app import create_app
from workspacegate.web.context import get_principal
from workspacegate.web.dependencies import get_principal_store, get_workspace_registry


@pytest.fixture()
def app() -> FastAPI:
    return create_app()


@pytest.fixture()
def registry() -> InMemoryWorkspaceRepository:
    registry = get_workspace_registry()
    assert isinstance(registry, InMemoryWorkspaceRepository)
    registry.put(make_record("A", usage=TenantUsage(user_count=10)))
    registry.put(make_record("B", tier=Tier.STANDARD, features={"auditLogs": True}))
    registry.put(make_record("D", is_active=False))
    return registry


@pytest.fixture()
def store() -> InMemoryPrincipalRepository:
    store = get_principal_store()
    assert isinstance(store, InMemoryPrincipalRepository)
    return store


@pytest.fixture()
def login(
    app: FastAPI, store: InMemoryPrincipalRepository
) -> Callable[[Principal], Principal]:
    """Act as ``principal`` for the following requests."""

    def _login(principal: Principal) -> Principal:
        store.put(principal)
        app.dependency_overrides[get_principal] = lambda: principal
        return principal

    return _login


@pytest.fixture()
async def client(app: FastAPI, registry: InMemoryWorkspaceRepository):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
