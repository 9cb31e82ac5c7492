"""Store and service construction shared by the web layer."""

from __future__ import annotations

from functools import lru_cache

import structlog

from workspacegate.audit.logger import get_audit_logger
from workspacegate.config.settings import get_settings
from workspacegate.storage.repositories.principals import (
    DatabasePrincipalRepository,
    InMemoryPrincipalRepository,
)
from workspacegate.storage.repositories.workspaces import (
    DatabaseWorkspaceRepository,
    InMemoryWorkspaceRepository,
)
from workspacegate.tenancy.resolver import ContextResolver
from workspacegate.tenancy.service import WorkspaceService
from workspacegate.tenancy.stores import PrincipalStore, WorkspaceRegistry

logger = structlog.get_logger(__name__)


@lru_cache
def get_workspace_registry() -> WorkspaceRegistry:
    """Create the appropriate workspace registry based on settings."""
    if get_settings().use_database:
        from workspacegate.storage.database import get_engine

        return DatabaseWorkspaceRepository(get_engine())
    logger.info("using_in_memory_workspace_registry")
    return InMemoryWorkspaceRepository()


@lru_cache
def get_principal_store() -> PrincipalStore:
    """Create the appropriate principal store based on settings."""
    if get_settings().use_database:
        from workspacegate.storage.database import get_engine

        return DatabasePrincipalRepository(get_engine())
    return InMemoryPrincipalRepository()


def get_resolver() -> ContextResolver:
    return ContextResolver(
        get_workspace_registry(),
        get_principal_store(),
        persist_adoption=get_settings().persist_adopted_workspace,
    )


def get_workspace_service() -> WorkspaceService:
    return WorkspaceService(get_workspace_registry(), get_principal_store(), get_audit_logger())
