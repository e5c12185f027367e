"""Tests for domain exceptions (error_code, message, details)."""

from identity_server.domain.exceptions import (
    AuthenticationException,
    ConflictException,
    DeletedRoleException,
    DeletedUserException,
    EmailAlreadyExistsException,
    IdentityProviderException,
    IdentityServerException,
    InvariantViolationException,
    RemoteStateDivergedException,
    ResourceNotFoundException,
    RoleAlreadyExistsException,
    SqlNotConfiguredException,
    SyncFailedException,
    UserAlreadyActiveException,
    UserAlreadyDeletedException,
    ValidationException,
)


def test_identity_server_exception_default_error_code() -> None:
    """Base exception uses class name as error_code when not provided."""
    exc = IdentityServerException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "IdentityServerException"
    assert exc.details == {}
    assert exc.to_dict() == {"error": "IdentityServerException", "message": "Something failed", "details": {}}


def test_validation_exception_merges_field_and_details() -> None:
    exc = ValidationException("Bad roles", field="role_ids", details={"missing_role_ids": ["r1"]})
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "role_ids", "missing_role_ids": ["r1"]}


def test_validation_exception_without_field() -> None:
    exc = ValidationException("Invalid")
    assert exc.details == {}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("user", "u-1")
    assert exc.message == "user not found: u-1"
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "user", "resource_id": "u-1"}


def test_conflicts_share_base_class() -> None:
    """Email, username and role-code collisions are all ConflictException."""
    assert isinstance(EmailAlreadyExistsException("a@x.com"), ConflictException)
    exc = RoleAlreadyExistsException("EDITOR")
    assert isinstance(exc, ConflictException)
    assert exc.error_code == "ROLE_ALREADY_EXISTS"
    assert exc.details == {"code": "EDITOR"}


def test_invariant_violations() -> None:
    for exc, code in (
        (UserAlreadyDeletedException("u-1"), "USER_ALREADY_DELETED"),
        (UserAlreadyActiveException("u-1"), "USER_ALREADY_ACTIVE"),
        (DeletedUserException("u-1"), "USER_DELETED"),
    ):
        assert isinstance(exc, InvariantViolationException)
        assert exc.error_code == code
        assert exc.details == {"user_id": "u-1"}
    role_exc = DeletedRoleException(["r-1", "r-2"], "Cannot assign deleted role(s)")
    assert role_exc.details == {"role_ids": ["r-1", "r-2"]}
    assert role_exc.message == "Cannot assign deleted role(s)"


def test_identity_provider_exception_carries_status_and_endpoint() -> None:
    exc = IdentityProviderException("boom", status_code=503, endpoint="https://idp/api/v2/users")
    assert exc.status_code == 503
    assert exc.details == {"status_code": 503, "endpoint": "https://idp/api/v2/users"}
    assert IdentityProviderException("timeout").status_code is None


def test_sync_failed_exception_reports_rollback() -> None:
    exc = SyncFailedException("create_user failed: boom")
    assert exc.error_code == "SYNC_FAILED"
    assert exc.details == {"rolled_back": True}
    assert SyncFailedException("x", user_id="u-1").details["user_id"] == "u-1"


def test_remote_state_diverged_exception_recommends_retry() -> None:
    exc = RemoteStateDivergedException("u-1", "update_profile", "503")
    assert exc.user_id == "u-1"
    assert exc.operation == "update_profile"
    assert exc.details["retry_recommended"] is True
    assert exc.details["reason"] == "503"


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert exc.error_code == "SERVICE_UNAVAILABLE"
