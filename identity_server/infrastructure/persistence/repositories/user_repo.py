"""User repository. Entity getters return ORM rows for mutation inside a transaction."""

from __future__ import annotations

from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.application.dtos.user import UserSearchFilter
from identity_server.domain.enums import UserSortField
from identity_server.domain.exceptions import (
    EmailAlreadyExistsException,
    UsernameAlreadyExistsException,
)
from identity_server.infrastructure.persistence.models.role import Role
from identity_server.infrastructure.persistence.models.user import User
from identity_server.infrastructure.persistence.repositories.base import (
    BaseRepository,
    escape_like,
)

_SORT_COLUMNS = {
    UserSortField.EMAIL: User.email,
    UserSortField.USERNAME: User.username,
    UserSortField.CREATED_AT: User.created_at,
    UserSortField.STATUS: User.is_deleted,
}


class UserRepository(BaseRepository[User]):
    """User repository. Locking reads, create, link, soft delete/restore, search."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_for_update(self, user_id: str) -> User | None:
        """Lock the users row (SELECT ... FOR UPDATE) then load it with roles.

        The lock query selects only the id so eager role loading never runs
        under FOR UPDATE. Backends without row locks (SQLite) ignore the clause.
        """
        locked = await self.db.execute(
            select(User.id).where(User.id == user_id).with_for_update()
        )
        if locked.scalar_one_or_none() is None:
            return None
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get_by_email(self, email: str, *, for_update: bool = False) -> User | None:
        """Exact (case-sensitive) email match, any delete state."""
        if for_update:
            locked = await self.db.execute(
                select(User.id).where(User.email == email).with_for_update()
            )
            user_id = locked.scalar_one_or_none()
            return await self.get_for_update(user_id) if user_id else None
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_remote_ref(self, remote_ref: str) -> User | None:
        result = await self.db.execute(select(User).where(User.remote_ref == remote_ref))
        return result.scalar_one_or_none()

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
    ) -> User:
        """Insert an active user; raise UsernameAlreadyExistsException on unique violation.

        Email uniqueness is checked by the caller under lock; an email
        violation here means another process inserted the same address.
        """
        user = User(
            username=username,
            email=email,
            display_name=display_name,
            remote_ref=remote_ref,
            avatar_url=avatar_url,
            activated=True,
            is_deleted=False,
            roles=list(roles),
            created_by=actor,
            updated_by=actor,
        )
        try:
            return await self.create(user)
        except IntegrityError as exc:
            if "email" in str(exc.orig).lower():
                raise EmailAlreadyExistsException(email) from exc
            raise UsernameAlreadyExistsException(username) from exc

    async def link_remote_identity(
        self, user: User, remote_ref: str, avatar_url: str | None, *, actor: str
    ) -> User:
        user.remote_ref = remote_ref
        user.avatar_url = avatar_url
        return await self.save(user, actor=actor)

    async def soft_delete(self, user: User, *, actor: str) -> User:
        user.is_deleted = True
        user.activated = False
        return await self.save(user, actor=actor)

    async def restore(self, user: User, *, actor: str) -> User:
        user.is_deleted = False
        user.activated = True
        return await self.save(user, actor=actor)

    async def update_display_name(self, user: User, display_name: str, *, actor: str) -> User:
        user.display_name = display_name
        return await self.save(user, actor=actor)

    async def replace_roles(self, user: User, roles: list[Any], *, actor: str) -> User:
        user.roles = list(roles)
        return await self.save(user, actor=actor)

    async def search(self, criteria: UserSearchFilter) -> tuple[list[User], int]:
        """Filter by term (email/username), delete flag, created range and roles."""
        stmt = select(User)
        if criteria.search and criteria.search.strip():
            pattern = f"%{escape_like(criteria.search.strip())}%"
            stmt = stmt.where(
                or_(
                    User.email.ilike(pattern, escape="\\"),
                    User.username.ilike(pattern, escape="\\"),
                )
            )
        if criteria.is_deleted is not None:
            stmt = stmt.where(User.is_deleted == criteria.is_deleted)
        if criteria.created_from is not None:
            stmt = stmt.where(User.created_at >= criteria.created_from)
        if criteria.created_to is not None:
            stmt = stmt.where(User.created_at <= criteria.created_to)
        if criteria.role_ids:
            stmt = stmt.where(User.roles.any(Role.id.in_(sorted(criteria.role_ids))))
        column = _SORT_COLUMNS[criteria.sort_by]
        stmt = stmt.order_by(column.desc() if criteria.descending else column.asc(), User.id)
        return await self.paginate(stmt, criteria.skip, criteria.limit)
