"""Domain exceptions for the identity server.

Defines domain-level exceptions that represent business rule violations and
failures at the seam with the remote identity provider. These exceptions are
independent of infrastructure concerns. Presentation layer maps them to HTTP
responses in exception handlers.

"Nothing to do" outcomes (already synced, no local row) are not exceptions;
see SyncOutcome and SyncResult.
"""

from typing import Any


class IdentityServerException(Exception):
    """Base exception for all identity server errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(IdentityServerException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            details: Optional extra context merged into details.
        """
        merged: dict[str, Any] = {"field": field} if field else {}
        merged.update(details or {})
        super().__init__(message, "VALIDATION_ERROR", merged)


class AuthenticationException(IdentityServerException):
    """Raised when the caller's identity cannot be resolved."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(IdentityServerException):
    """Raised when a referenced local user or role does not exist. Never retried."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'role').
            resource_id: The ID (or code) that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(IdentityServerException):
    """Raised when a unique identity (email, username, role code) is already in use."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class EmailAlreadyExistsException(ConflictException):
    """Raised when creating a user whose email belongs to an active (not soft-deleted) user."""

    def __init__(self, email: str) -> None:
        super().__init__(
            "Email already exists.",
            "EMAIL_ALREADY_EXISTS",
            {"email": email},
        )


class UsernameAlreadyExistsException(ConflictException):
    """Raised when creating a user whose username is taken."""

    def __init__(self, username: str) -> None:
        super().__init__(
            "Username already exists.",
            "USERNAME_ALREADY_EXISTS",
            {"username": username},
        )


class RoleAlreadyExistsException(ConflictException):
    """Raised when creating a role whose code exists (case-insensitive)."""

    def __init__(self, code: str) -> None:
        super().__init__(
            f"Role with code '{code}' already exists",
            "ROLE_ALREADY_EXISTS",
            {"code": code},
        )


class InvariantViolationException(IdentityServerException):
    """Raised when an operation is invalid for the record's current state.

    Rejected before any mutation (e.g. reactivating an active user,
    deleting a deleted one).
    """

    def __init__(
        self,
        message: str,
        error_code: str = "INVARIANT_VIOLATION",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class UserAlreadyDeletedException(InvariantViolationException):
    """Raised when deactivating a user that is already soft-deleted."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "User is already deleted.",
            "USER_ALREADY_DELETED",
            {"user_id": user_id},
        )


class UserAlreadyActiveException(InvariantViolationException):
    """Raised when reactivating a user that is not soft-deleted."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "User is already active.",
            "USER_ALREADY_ACTIVE",
            {"user_id": user_id},
        )


class DeletedUserException(InvariantViolationException):
    """Raised when updating or reading the profile of a soft-deleted user."""

    def __init__(self, user_id: str, message: str = "Cannot update deleted user") -> None:
        super().__init__(message, "USER_DELETED", {"user_id": user_id})


class DeletedRoleException(InvariantViolationException):
    """Raised when reading, updating or assigning a soft-deleted role."""

    def __init__(self, role_ids: list[str], message: str = "Role has been deleted") -> None:
        super().__init__(message, "ROLE_DELETED", {"role_ids": role_ids})


class IdentityProviderException(IdentityServerException):
    """Transport-level failure talking to the IdP (network, timeout, non-2xx).

    Distinct from a "not found" lookup result, which clients return as None.

    Attributes:
        status_code: HTTP status from the IdP, or None when no response arrived.
        endpoint: Request URL (without query secrets).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(
            message,
            "IDENTITY_PROVIDER_ERROR",
            {"status_code": status_code, "endpoint": endpoint},
        )


class SyncFailedException(IdentityServerException):
    """Fatal failure on a create path; the local transaction was rolled back."""

    def __init__(self, message: str, user_id: str | None = None) -> None:
        details: dict[str, Any] = {"rolled_back": True}
        if user_id:
            details["user_id"] = user_id
        super().__init__(message, "SYNC_FAILED", details)


class RemoteStateDivergedException(IdentityServerException):
    """Local change committed but the matching IdP change failed.

    Raised after commit by reactivation and profile updates. The caller
    should surface "partially applied, please retry".
    """

    def __init__(self, user_id: str, operation: str, reason: str) -> None:
        self.user_id = user_id
        self.operation = operation
        super().__init__(
            "Change was applied locally but not at the identity provider; please retry.",
            "REMOTE_STATE_DIVERGED",
            {
                "user_id": user_id,
                "operation": operation,
                "reason": reason,
                "retry_recommended": True,
            },
        )


class SqlNotConfiguredException(IdentityServerException):
    """Raised when an operation requires the database but no engine is configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
