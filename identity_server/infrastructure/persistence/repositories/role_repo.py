"""Role repository. Codes are compared case-insensitively."""

from __future__ import annotations

from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.application.dtos.role import RoleSearchFilter
from identity_server.domain.enums import RoleSortField
from identity_server.infrastructure.persistence.models.role import Role
from identity_server.infrastructure.persistence.repositories.base import (
    BaseRepository,
    escape_like,
)

_SORT_COLUMNS = {
    RoleSortField.CODE: Role.code,
    RoleSortField.DESCRIPTION: Role.description,
    RoleSortField.CREATED_AT: Role.created_at,
    RoleSortField.STATUS: Role.is_deleted,
}


class RoleRepository(BaseRepository[Role]):
    """Role repository. get_by_code, exists_by_code, get_many, create_role, search."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_code(self, code: str) -> Role | None:
        result = await self.db.execute(
            select(Role).where(func.lower(Role.code) == code.strip().lower())
        )
        return result.scalar_one_or_none()

    async def exists_by_code(self, code: str) -> bool:
        result = await self.db.execute(
            select(exists().where(func.lower(Role.code) == code.strip().lower()))
        )
        return bool(result.scalar())

    async def get_many(self, role_ids: list[str]) -> list[Role]:
        if not role_ids:
            return []
        result = await self.db.execute(select(Role).where(Role.id.in_(role_ids)))
        return list(result.scalars().all())

    async def create_role(self, *, code: str, description: str | None, actor: str) -> Role:
        role = Role(
            code=code,
            description=description,
            is_deleted=False,
            created_by=actor,
            updated_by=actor,
        )
        return await self.create(role)

    async def search(self, criteria: RoleSearchFilter) -> tuple[list[Role], int]:
        """Filter by term (code/description), delete flag and created range."""
        stmt = select(Role)
        if criteria.search and criteria.search.strip():
            pattern = f"%{escape_like(criteria.search.strip())}%"
            stmt = stmt.where(
                or_(
                    Role.code.ilike(pattern, escape="\\"),
                    Role.description.ilike(pattern, escape="\\"),
                )
            )
        if criteria.is_deleted is not None:
            stmt = stmt.where(Role.is_deleted == criteria.is_deleted)
        if criteria.created_from is not None:
            stmt = stmt.where(Role.created_at >= criteria.created_from)
        if criteria.created_to is not None:
            stmt = stmt.where(Role.created_at <= criteria.created_to)
        column = _SORT_COLUMNS[criteria.sort_by]
        stmt = stmt.order_by(column.desc() if criteria.descending else column.asc(), Role.id)
        return await self.paginate(stmt, criteria.skip, criteria.limit)

    async def list_active(self) -> list[Role]:
        result = await self.db.execute(
            select(Role).where(Role.is_deleted.is_(False)).order_by(Role.code)
        )
        return list(result.scalars().all())
