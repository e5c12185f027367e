"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (IdP HTTP client,
record locks, unit of work, DB engine dispose) and the optional default
admin sync.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from identity_server.application.services.user_sync_service import UserSyncService
from identity_server.core.config import Settings, get_settings
from identity_server.domain.exceptions import SyncFailedException
from identity_server.infrastructure.external.identity import Auth0IdentityClient
from identity_server.infrastructure.persistence import database
from identity_server.infrastructure.persistence.locking import RecordLockManager
from identity_server.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


async def sync_default_admin(settings: Settings, sync_service: UserSyncService) -> None:
    """Link the seeded admin row to an IdP identity (no-op when already linked).

    Raises SyncFailedException so a broken IdP configuration fails startup.
    """
    try:
        result = await sync_service.sync_default_user(
            settings.default_admin_user_id,
            settings.default_admin_email,
            settings.default_admin_password.get_secret_value(),
            settings.default_admin_name,
        )
    except SyncFailedException:
        logger.exception("Default admin sync failed for %s", settings.default_admin_user_id)
        raise
    logger.info("Default admin sync: %s (%s)", result.outcome.value, result.message)


async def _shutdown(app: FastAPI) -> None:
    """Close the shared HTTP client and dispose the SQL engine."""
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Identity provider HTTP client closed")

    await database.dispose_engine()
    logger.info("Database engine disposed")


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, identity client, record locks, unit of
    work, default admin sync (if enabled). Shutdown order: HTTP client close,
    SQL engine dispose. A failed admin sync runs shutdown before re-raising.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for IdP calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.idp_request_timeout_seconds)
    app.state.identity_client = Auth0IdentityClient.from_settings(settings, app.state.http_client)
    app.state.record_locks = RecordLockManager()
    app.state.unit_of_work = SqlAlchemyUnitOfWork(
        database.get_session_factory(), isolation_level=settings.isolation_level
    )

    if settings.default_admin_sync_enabled:
        sync_service = UserSyncService(
            app.state.unit_of_work,
            app.state.identity_client,
            app.state.record_locks,
            connection=settings.idp_connection,
            timeout_seconds=settings.sync_timeout_seconds,
        )
        try:
            await sync_default_admin(settings, sync_service)
        except Exception:
            await _shutdown(app)
            raise

    yield

    # ---- Shutdown ----
    await _shutdown(app)
