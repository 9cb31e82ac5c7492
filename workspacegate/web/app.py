"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workspacegate import __version__
from workspacegate.config.logging import setup_logging
from workspacegate.config.settings import get_settings
from workspacegate.web.errors import register_exception_handlers
from workspacegate.web.health import check_health
from workspacegate.web.middleware import RequestIDMiddleware
from workspacegate.web.routes.context import router as context_router
from workspacegate.web.routes.workspaces import router as workspaces_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    if get_settings().use_database:
        from workspacegate.storage.database import init_db

        await init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Authentication is mounted in front of this app by the host service; it
    must place the verified principal on ``request.state.principal``.
    """
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_output=not settings.debug)

    app = FastAPI(
        title="workspacegate",
        description="Workspace resolution and policy enforcement",
        version=__version__,
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    # Middleware (order matters: last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", settings.workspace_header],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/api/health")
    async def health_check() -> dict[str, object]:
        return await check_health()

    app.include_router(context_router)
    app.include_router(workspaces_router)

    logger.info("app_created", use_database=settings.use_database)
    return app
