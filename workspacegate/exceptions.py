"""Exception hierarchy for workspacegate."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    NO_PRINCIPAL = "NO_PRINCIPAL"
    NO_WORKSPACE = "NO_WORKSPACE"
    WORKSPACE_ACCESS_DENIED = "WORKSPACE_ACCESS_DENIED"
    INVALID_WORKSPACE = "INVALID_WORKSPACE"
    WORKSPACE_INACTIVE = "WORKSPACE_INACTIVE"
    TIER_RESTRICTED = "TIER_RESTRICTED"
    FEATURE_NOT_AVAILABLE = "FEATURE_NOT_AVAILABLE"
    USER_LIMIT_REACHED = "USER_LIMIT_REACHED"
    TASK_LIMIT_REACHED = "TASK_LIMIT_REACHED"
    TEAM_LIMIT_REACHED = "TEAM_LIMIT_REACHED"
    UNEXPECTED_RESOLUTION_FAILURE = "UNEXPECTED_RESOLUTION_FAILURE"


class WorkspaceGateError(Exception):
    """Base exception for all workspacegate errors."""


class StorageError(WorkspaceGateError):
    """Raised when a datastore read or write fails."""


class WorkspaceNotFound(WorkspaceGateError):
    """Raised by administrative operations on an unknown workspace id."""

    def __init__(self, workspace_id: str) -> None:
        super().__init__(f"Workspace not found: {workspace_id}")
        self.workspace_id = workspace_id


class PrincipalNotFound(WorkspaceGateError):
    """Raised when a membership operation names an unknown principal."""

    def __init__(self, principal_id: str) -> None:
        super().__init__(f"Principal not found: {principal_id}")
        self.principal_id = principal_id


class WorkspaceNameTaken(WorkspaceGateError):
    """Raised when a workspace name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"A workspace with this name already exists: {name}")
        self.name = name


class Rejection(WorkspaceGateError):
    """Typed, user-visible refusal of a request.

    ``fields`` holds the contextual values echoed in the payload
    (``workspaceId``, ``limit``, ``current``...).
    """

    def __init__(self, error_code: ErrorCode, message: str, **fields: Any) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.fields = fields

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "errorCode": str(self.error_code), **self.fields}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code!s}, {self.message!r})"


class ResolutionRejected(Rejection):
    """The principal could not be placed inside a workspace."""


class PolicyDenied(Rejection):
    """A guard predicate refused the resolved context."""


class UnexpectedResolutionFailure(Rejection):
    """Infrastructure failure while resolving; the only retryable category."""

    def __init__(self, message: str = "Failed to resolve workspace context") -> None:
        super().__init__(ErrorCode.UNEXPECTED_RESOLUTION_FAILURE, message)
