"""Translate workspacegate exceptions into HTTP responses."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse

from workspacegate.exceptions import (
    PrincipalNotFound,
    Rejection,
    UnexpectedResolutionFailure,
    WorkspaceNameTaken,
    WorkspaceNotFound,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request


def rejection_status(rejection: Rejection) -> int:
    if isinstance(rejection, UnexpectedResolutionFailure):
        return 500
    return 403


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Rejection)
    async def rejection_handler(_request: Request, exc: Rejection) -> JSONResponse:
        return JSONResponse(status_code=rejection_status(exc), content=exc.to_payload())

    @app.exception_handler(WorkspaceNotFound)
    async def workspace_not_found_handler(
        _request: Request, exc: WorkspaceNotFound
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PrincipalNotFound)
    async def principal_not_found_handler(
        _request: Request, exc: PrincipalNotFound
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(WorkspaceNameTaken)
    async def name_taken_handler(_request: Request, exc: WorkspaceNameTaken) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})
