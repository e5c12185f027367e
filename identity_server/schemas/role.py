"""Role API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RoleCreateRequest(BaseModel):
    """Request body for creating a role. Code is stored upper-case."""

    code: str = Field(..., min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=500)


class RoleUpdateRequest(BaseModel):
    """Request body for updating a role's description."""

    description: str | None = Field(default=None, max_length=500)


class BulkDeleteRolesRequest(BaseModel):
    """Request body for POST /roles/bulk-delete."""

    ids: list[str] = Field(..., min_length=1, max_length=500)


class BulkDeleteRolesResponse(BaseModel):
    """Number of roles actually deleted (system and already deleted roles are skipped)."""

    deleted_count: int


class RoleResponse(BaseModel):
    """Role list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    description: str | None
    is_deleted: bool
    created_by: str | None = None
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None
