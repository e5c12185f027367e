"""Repository and transaction interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
Entity-returning methods hand back ORM rows typed as Any so services can
mutate them inside the owning transaction; read methods return DTOs.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from identity_server.application.dtos.role import RoleSearchFilter
    from identity_server.application.dtos.user import UserSearchFilter


class IUserRepository(Protocol):
    """Protocol for the local user store."""

    async def get_by_id(self, user_id: str) -> Any | None:
        """Return the user row (any delete state) or None."""

    async def get_for_update(self, user_id: str) -> Any | None:
        """Return the user row under an exclusive row lock (SELECT ... FOR UPDATE)."""

    async def get_by_email(self, email: str, *, for_update: bool = False) -> Any | None:
        """Return the user with this exact email (any delete state) or None."""

    async def get_by_remote_ref(self, remote_ref: str) -> Any | None:
        """Return the user linked to this remote identity or None."""

    async def create_user(
        self,
        *,
        username: str,
        email: str,
        display_name: str | None,
        roles: list[Any],
        actor: str,
        remote_ref: str | None = None,
        avatar_url: str | None = None,
    ) -> Any:
        """Insert an active user and flush; raise UsernameAlreadyExistsException on duplicate."""

    async def link_remote_identity(
        self, user: Any, remote_ref: str, avatar_url: str | None, *, actor: str
    ) -> Any:
        """Stamp remote reference and avatar on the user."""

    async def soft_delete(self, user: Any, *, actor: str) -> Any:
        """Set is_deleted=True, activated=False."""

    async def restore(self, user: Any, *, actor: str) -> Any:
        """Set is_deleted=False, activated=True."""

    async def update_display_name(self, user: Any, display_name: str, *, actor: str) -> Any:
        """Change the display name."""

    async def replace_roles(self, user: Any, roles: list[Any], *, actor: str) -> Any:
        """Replace the user's role set."""

    async def search(self, criteria: UserSearchFilter) -> tuple[list[Any], int]:
        """Return (rows for the requested page, total matching count)."""


class IRoleRepository(Protocol):
    """Protocol for the role store."""

    async def get_by_id(self, role_id: str) -> Any | None:
        """Return the role row (any delete state) or None."""

    async def get_by_code(self, code: str) -> Any | None:
        """Return the role with this code, compared case-insensitively."""

    async def exists_by_code(self, code: str) -> bool:
        """True if a role with this code exists (case-insensitive, any delete state)."""

    async def get_many(self, role_ids: list[str]) -> list[Any]:
        """Return the roles among role_ids that exist."""

    async def create_role(self, *, code: str, description: str | None, actor: str) -> Any:
        """Insert a role and flush."""

    async def save(self, role: Any, *, actor: str) -> Any:
        """Stamp updated_by and flush pending changes on the role."""

    async def search(self, criteria: RoleSearchFilter) -> tuple[list[Any], int]:
        """Return (rows for the requested page, total matching count)."""

    async def list_active(self) -> list[Any]:
        """Return all non-deleted roles ordered by code."""


class IStoreTransaction(Protocol):
    """Repositories bound to one open transaction."""

    users: IUserRepository
    roles: IRoleRepository


class IUnitOfWork(Protocol):
    """Scoped transaction boundary over the local store.

    Commits when the context exits normally; rolls back on any exception.
    """

    def transaction(self) -> AbstractAsyncContextManager[IStoreTransaction]:
        """Open a session, begin a transaction, yield bound repositories."""
