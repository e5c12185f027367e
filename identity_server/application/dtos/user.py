"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime

from identity_server.domain.enums import UserSortField


@dataclass(frozen=True)
class RoleRef:
    """Role summary embedded in user results."""

    id: str
    code: str


@dataclass(frozen=True)
class UserResult:
    """User read-model (result of create, sync, search, detail)."""

    id: str
    username: str
    email: str
    display_name: str | None
    remote_ref: str | None
    avatar_url: str | None
    activated: bool
    is_deleted: bool
    roles: tuple[RoleRef, ...] = ()
    created_by: str | None = None
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None

    @property
    def synced(self) -> bool:
        """True once the user is linked to a remote identity."""
        return self.remote_ref is not None


@dataclass(frozen=True)
class UserSearchFilter:
    """Criteria for user search. None fields are not filtered on."""

    search: str | None = None
    is_deleted: bool | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    role_ids: frozenset[str] = field(default_factory=frozenset)
    skip: int = 0
    limit: int = 20
    sort_by: UserSortField = UserSortField.EMAIL
    descending: bool = False
