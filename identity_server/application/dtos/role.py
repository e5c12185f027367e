"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from identity_server.domain.enums import RoleSortField


@dataclass(frozen=True)
class RoleResult:
    """Role read-model (result of get_role, search_roles, create_role, etc.)."""

    id: str
    code: str
    description: str | None
    is_deleted: bool
    created_by: str | None = None
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RoleSearchFilter:
    """Criteria for role search over code and description."""

    search: str | None = None
    is_deleted: bool | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    skip: int = 0
    limit: int = 20
    sort_by: RoleSortField = RoleSortField.CODE
    descending: bool = False
