"""User and profile API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from identity_server.domain.enums import SyncOutcome


class UserCreateRequest(BaseModel):
    """Request body for creating (or reactivating) a user."""

    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr = Field(...)
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class UserActivateRequest(BaseModel):
    """Optional body for PUT /users/{id}/activate.

    Used only when a fresh remote identity must be created; without a
    password a temporary one is generated.
    """

    password: str | None = Field(default=None, min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class UserSyncRequest(BaseModel):
    """Request body for POST /users/{id}/sync (link a seeded user to the IdP)."""

    email: EmailStr = Field(...)
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class UpdateUserRolesRequest(BaseModel):
    """Request body for PUT /users/{id}/roles (replaces the role set)."""

    role_ids: list[str] = Field(..., min_length=1, max_length=100)


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /profile."""

    name: str = Field(..., min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=8, max_length=128)


class LoginSyncRequest(BaseModel):
    """Request body for POST /profile/login-sync (claims from the caller's IdP token)."""

    email: EmailStr = Field(...)
    name: str | None = Field(default=None, max_length=255)
    picture: str | None = Field(default=None, max_length=2048)


class RoleRefResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str


class UserResponse(BaseModel):
    """User list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    display_name: str | None
    remote_ref: str | None
    avatar_url: str | None
    activated: bool
    is_deleted: bool
    roles: list[RoleRefResponse] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None


class SyncResultResponse(BaseModel):
    """Outcome of a synchronizing operation.

    outcome is applied, no_op or diverged (local change kept, IdP not updated;
    retry recommended).
    """

    model_config = ConfigDict(from_attributes=True)

    outcome: SyncOutcome
    message: str
    user: UserResponse | None = None
