"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from identity_server.domain.enums import RoleSortField, SyncOutcome, UserSortField
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
    UsernameAlreadyExistsException,
    ValidationException,
)

__all__ = [
    # Enums
    "RoleSortField",
    "SyncOutcome",
    "UserSortField",
    # Exceptions
    "AuthenticationException",
    "ConflictException",
    "DeletedRoleException",
    "DeletedUserException",
    "EmailAlreadyExistsException",
    "IdentityProviderException",
    "IdentityServerException",
    "InvariantViolationException",
    "RemoteStateDivergedException",
    "ResourceNotFoundException",
    "RoleAlreadyExistsException",
    "SqlNotConfiguredException",
    "SyncFailedException",
    "UserAlreadyActiveException",
    "UserAlreadyDeletedException",
    "UsernameAlreadyExistsException",
    "ValidationException",
]
