"""Integration tests for workspace resolution over HTTP."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from factories import make_principal
from fastapi import Depends

from workspacegate.exceptions import StorageError
from workspacegate.models.domain import RequestContext
from workspacegate.tenancy.guard import AUDIT_LOGS, require_under_limit
from workspacegate.tenancy.resolver import ContextResolver
from workspacegate.tenancy.stores import WorkspaceRegistry
from workspacegate.types import Resource, Role
from workspacegate.web.context import enforce, get_principal
from workspacegate.web.dependencies import get_resolver

if TYPE_CHECKING:
    from fastapi import FastAPI
    from httpx import AsyncClient

    from workspacegate.storage.repositories.principals import InMemoryPrincipalRepository


@pytest.fixture()
def guarded_app(app: FastAPI) -> FastAPI:
    @app.get("/guarded/audit-logs")
    async def audit_logs(context: RequestContext = Depends(enforce(AUDIT_LOGS))) -> dict:
        return {"workspace": context.resolved_tenant_id}

    @app.post("/guarded/users")
    async def add_user(
        context: RequestContext = Depends(enforce(require_under_limit(Resource.USERS))),
    ) -> dict:
        return {"workspace": context.resolved_tenant_id}

    return app


@pytest.mark.integration
class TestContextRoute:
    async def test_resolves_current_workspace(self, client: AsyncClient, login) -> None:
        login(make_principal(current="B", memberships=[("B", Role.TENANT_OWNER, True)]))
        resp = await client.get("/api/context")
        assert resp.status_code == 200
        data = resp.json()
        assert data["workspace_id"] == "B"
        assert data["workspace_tier"] == "STANDARD"
        assert data["role"] == "tenant_owner"
        assert data["all_workspace_ids"] == ["B"]

    async def test_adoption_is_persisted(
        self, client: AsyncClient, login, store: InMemoryPrincipalRepository
    ) -> None:
        login(make_principal(legacy="A", memberships=[("B", Role.MEMBER, True)]))
        resp = await client.get("/api/context")
        assert resp.json()["workspace_id"] == "B"
        assert (await store.get("u1")).current_tenant_id == "B"

    async def test_principal_unknown_to_store(
        self, app: FastAPI, client: AsyncClient, store: InMemoryPrincipalRepository
    ) -> None:
        principal = make_principal(memberships=[("B", Role.MEMBER, True)])
        app.dependency_overrides[get_principal] = lambda: principal
        resp = await client.get("/api/context")
        assert resp.status_code == 200
        assert resp.json()["workspace_id"] == "B"
        assert await store.get(principal.id) is None

    async def test_override_header(self, client: AsyncClient, login) -> None:
        login(
            make_principal(
                current="A", memberships=[("A", Role.MEMBER, True), ("B", Role.MEMBER, True)]
            )
        )
        resp = await client.get("/api/context", headers={"X-Workspace-Id": "B"})
        assert resp.json()["workspace_id"] == "B"

    async def test_override_denied(self, client: AsyncClient, login) -> None:
        login(make_principal(memberships=[("A", Role.MEMBER, True)]))
        resp = await client.get("/api/context", headers={"X-Workspace-Id": "B"})
        assert resp.status_code == 403
        assert resp.json() == {
            "message": "You do not have access to this workspace",
            "errorCode": "WORKSPACE_ACCESS_DENIED",
            "workspaceId": "B",
        }

    async def test_inactive_workspace_for_superuser(self, client: AsyncClient, login) -> None:
        login(make_principal(role=Role.SUPERUSER))
        resp = await client.get("/api/context", headers={"X-Workspace-Id": "D"})
        assert resp.status_code == 403
        assert resp.json()["errorCode"] == "WORKSPACE_INACTIVE"

    async def test_no_workspace(self, client: AsyncClient, login) -> None:
        login(make_principal())
        resp = await client.get("/api/context")
        assert resp.status_code == 403
        assert resp.json()["errorCode"] == "NO_WORKSPACE"

    async def test_tenantless_superuser(self, client: AsyncClient, login) -> None:
        login(make_principal(role=Role.SUPERUSER))
        data = (await client.get("/api/context")).json()
        assert data["workspace_id"] is None
        assert data["is_superuser"] is True

    async def test_registry_failure_is_500(
        self, app: FastAPI, client: AsyncClient, login
    ) -> None:
        registry = AsyncMock(spec=WorkspaceRegistry)
        registry.find_tenant_by_id.side_effect = StorageError("down")
        app.dependency_overrides[get_resolver] = lambda: ContextResolver(registry)
        login(make_principal(current="A", memberships=[("A", Role.MEMBER, True)]))

        resp = await client.get("/api/context")
        assert resp.status_code == 500
        assert resp.json()["errorCode"] == "UNEXPECTED_RESOLUTION_FAILURE"


@pytest.mark.integration
class TestLimitStatus:
    async def test_community_at_limit(self, client: AsyncClient, login) -> None:
        login(make_principal(current="A", memberships=[("A", Role.MEMBER, True)]))
        resp = await client.get("/api/context/limits/users")
        assert resp.json() == {"resource": "users", "limit": 10, "current": 10, "allowed": False}

    async def test_coordinator_bypasses_limit(self, client: AsyncClient, login) -> None:
        login(make_principal(current="A", memberships=[("A", Role.COORDINATOR, True)]))
        resp = await client.get("/api/context/limits/users")
        assert resp.json()["allowed"] is True

    async def test_tenantless_superuser(self, client: AsyncClient, login) -> None:
        login(make_principal(role=Role.SUPERUSER))
        resp = await client.get("/api/context/limits/tasks")
        assert resp.json() == {"resource": "tasks", "limit": None, "current": None, "allowed": True}

    async def test_unknown_resource(self, client: AsyncClient, login) -> None:
        login(make_principal(current="A", memberships=[("A", Role.MEMBER, True)]))
        resp = await client.get("/api/context/limits/projects")
        assert resp.status_code == 422


@pytest.mark.integration
class TestEnforce:
    async def test_feature_denied_on_community(
        self, guarded_app: FastAPI, client: AsyncClient, login
    ) -> None:
        login(make_principal(current="A", memberships=[("A", Role.TENANT_OWNER, True)]))
        resp = await client.get("/guarded/audit-logs")
        assert resp.status_code == 403
        assert resp.json()["errorCode"] == "TIER_RESTRICTED"

    async def test_feature_allowed_on_standard(
        self, guarded_app: FastAPI, client: AsyncClient, login
    ) -> None:
        login(make_principal(current="B", memberships=[("B", Role.MEMBER, True)]))
        resp = await client.get("/guarded/audit-logs")
        assert resp.status_code == 200
        assert resp.json() == {"workspace": "B"}

    async def test_limit_payload(
        self, guarded_app: FastAPI, client: AsyncClient, login
    ) -> None:
        login(make_principal(current="A", memberships=[("A", Role.TENANT_OWNER, True)]))
        resp = await client.post("/guarded/users")
        assert resp.status_code == 403
        assert resp.json() == {
            "message": "User limit reached. Your workspace is limited to 10 users.",
            "errorCode": "USER_LIMIT_REACHED",
            "limit": 10,
            "current": 10,
        }

    async def test_superuser_bypasses_guards(
        self, guarded_app: FastAPI, client: AsyncClient, login
    ) -> None:
        login(make_principal(role=Role.SUPERUSER))
        resp = await client.post("/guarded/users", headers={"X-Workspace-Id": "A"})
        assert resp.status_code == 200
