"""Base repository: generic lookup, insert and paging helpers."""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally (use with escape='\\\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create, save and paginate.

    Subclasses add entity-specific queries. All writes flush within the
    caller's transaction; commit belongs to the unit of work.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record (flush, no commit)."""
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def save(self, obj: Any, *, actor: str) -> ModelType:
        """Stamp updated_by and flush pending changes on an attached record."""
        obj.updated_by = actor
        await self.db.flush()
        return obj

    async def paginate(
        self, stmt: Select[Any], skip: int, limit: int
    ) -> tuple[list[ModelType], int]:
        """Run stmt for one page and return (rows, total count without paging)."""
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).subquery()
        )
        total = (await self.db.execute(count_stmt)).scalar_one()
        result = await self.db.execute(stmt.offset(skip).limit(limit))
        return list(result.scalars().all()), int(total)
