import pytest

from workspacegate.exceptions import (
    ErrorCode,
    PolicyDenied,
    PrincipalNotFound,
    Rejection,
    ResolutionRejected,
    UnexpectedResolutionFailure,
    WorkspaceGateError,
    WorkspaceNameTaken,
    WorkspaceNotFound,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            WorkspaceNotFound("w1"),
            PrincipalNotFound("u1"),
            WorkspaceNameTaken("Acme"),
            ResolutionRejected(ErrorCode.NO_WORKSPACE, "none"),
            PolicyDenied(ErrorCode.TIER_RESTRICTED, "tier"),
            UnexpectedResolutionFailure(),
        ],
    )
    def test_all_derive_from_base(self, exc: Exception) -> None:
        assert isinstance(exc, WorkspaceGateError)

    def test_rejections_share_a_base(self) -> None:
        assert issubclass(ResolutionRejected, Rejection)
        assert issubclass(PolicyDenied, Rejection)
        assert issubclass(UnexpectedResolutionFailure, Rejection)

    def test_not_found_carries_id(self) -> None:
        exc = WorkspaceNotFound("w1")
        assert exc.workspace_id == "w1"
        assert "w1" in str(exc)


@pytest.mark.unit
class TestRejectionPayload:
    def test_payload_shape(self) -> None:
        rejection = ResolutionRejected(
            ErrorCode.WORKSPACE_INACTIVE, "deactivated", workspaceId="w1"
        )
        assert rejection.to_payload() == {
            "message": "deactivated",
            "errorCode": "WORKSPACE_INACTIVE",
            "workspaceId": "w1",
        }

    def test_unexpected_failure_defaults(self) -> None:
        payload = UnexpectedResolutionFailure().to_payload()
        assert payload == {
            "message": "Failed to resolve workspace context",
            "errorCode": "UNEXPECTED_RESOLUTION_FAILURE",
        }

    def test_repr_names_code(self) -> None:
        assert "TIER_RESTRICTED" in repr(PolicyDenied(ErrorCode.TIER_RESTRICTED, "x"))
