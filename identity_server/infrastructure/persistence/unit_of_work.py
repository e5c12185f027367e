"""Unit of work: scoped transaction boundary over the SQLAlchemy session.

One transaction() call = one session + one transaction. Repositories bound to
the session are exposed on the yielded scope. Commit happens when the block
exits normally; any exception rolls back and propagates.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_server.infrastructure.persistence.repositories.role_repo import (
    RoleRepository,
)
from identity_server.infrastructure.persistence.repositories.user_repo import (
    UserRepository,
)


class StoreTransaction:
    """Repositories sharing one open session/transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)


class SqlAlchemyUnitOfWork:
    """Opens transactions with an optional isolation level (e.g. SERIALIZABLE)."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        isolation_level: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._isolation_level = isolation_level

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreTransaction]:
        """Begin, yield repositories, commit on success, roll back on exception."""
        async with self._session_factory() as session:
            async with session.begin():
                if self._isolation_level:
                    await session.connection(
                        execution_options={"isolation_level": self._isolation_level}
                    )
                yield StoreTransaction(session)
