"""Pytest configuration and fixtures for identity_server.

Settings are read from the environment, so test defaults are set before any
identity_server import. Store-backed fixtures use a per-test aiosqlite file
database created from the ORM metadata; the IdP is an in-memory fake
(tests/fakes.py). Tests that need PostgreSQL row locks use the
requires_db marker and skip otherwise.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("IDP_DOMAIN", "tenant.test.auth0.com")
os.environ.setdefault("IDP_CLIENT_ID", "test-client-id")
os.environ.setdefault("IDP_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("IDP_AUDIENCE", "https://tenant.test.auth0.com/api/v2/")
os.environ.setdefault("DEFAULT_ADMIN_SYNC_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from identity_server.application.services.role_service import RoleService
from identity_server.application.services.user_admin_service import UserAdminService
from identity_server.application.services.user_sync_service import UserSyncService
from identity_server.core.config import get_settings
from identity_server.core.constants import ROLE_USER, SYSTEM_ACTOR
from identity_server.infrastructure.persistence import models  # noqa: F401
from identity_server.infrastructure.persistence.database import Base, get_db
from identity_server.infrastructure.persistence.locking import RecordLockManager
from identity_server.infrastructure.persistence.seed import seed_roles
from identity_server.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from tests.fakes import FakeIdentityProvider

get_settings.cache_clear()

CONNECTION = "Username-Password-Authentication"


@pytest.fixture
async def session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    """Fresh SQLite database with schema and the USER/ADMIN roles."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with SqlAlchemyUnitOfWork(factory).transaction() as tx:
        await seed_roles(tx)
    yield factory
    await engine.dispose()


@pytest.fixture
def uow(session_factory) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def locks() -> RecordLockManager:
    return RecordLockManager()


@pytest.fixture
def idp() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def sync_service(uow, idp, locks) -> UserSyncService:
    return UserSyncService(uow, idp, locks, connection=CONNECTION, timeout_seconds=5.0)


@pytest.fixture
def admin_service(uow, locks) -> UserAdminService:
    return UserAdminService(uow, locks)


@pytest.fixture
def role_service(uow) -> RoleService:
    return RoleService(uow)


@pytest.fixture
def seed_user(uow):
    """Insert a local user directly (unsynced unless remote_ref is given); returns its id."""

    async def _seed(
        email: str,
        *,
        username: str | None = None,
        remote_ref: str | None = None,
        deleted: bool = False,
    ) -> str:
        async with uow.transaction() as tx:
            role = await tx.roles.get_by_code(ROLE_USER)
            user = await tx.users.create_user(
                username=username or email,
                email=email,
                display_name=email.split("@")[0],
                roles=[role],
                actor=SYSTEM_ACTOR,
                remote_ref=remote_ref,
            )
            if deleted:
                await tx.users.soft_delete(user, actor=SYSTEM_ACTOR)
            return user.id

    return _seed


@pytest.fixture
async def client(uow, idp, locks, session_factory) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI).

    ASGITransport does not run the lifespan, so app.state is filled with the
    test store and fake IdP here.
    """
    from identity_server.main import app

    async def _test_db():
        async with session_factory() as session:
            yield session

    app.state.unit_of_work = uow
    app.state.identity_client = idp
    app.state.record_locks = locks
    app.dependency_overrides[get_db] = _test_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
