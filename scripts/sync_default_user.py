"""Link a seeded local user to a new IdP identity (same path as startup admin sync).

Usage:
    python -m scripts.sync_default_user <user_id> <email> <name>
The password is read from the SYNC_USER_PASSWORD environment variable so it
never appears in shell history. Prints the outcome; exits 1 on failure.
"""

import asyncio
import os
import sys

import httpx

from identity_server.application.services.user_sync_service import UserSyncService
from identity_server.core.config import get_settings
from identity_server.domain.exceptions import SyncFailedException
from identity_server.infrastructure.external.identity import Auth0IdentityClient
from identity_server.infrastructure.persistence.database import (
    dispose_engine,
    get_session_factory,
)
from identity_server.infrastructure.persistence.locking import RecordLockManager
from identity_server.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from identity_server.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Run sync_default_user for one local user."""
    if len(sys.argv) < 4:
        print(
            "Usage: python -m scripts.sync_default_user <user_id> <email> <name>",
            file=sys.stderr,
        )
        sys.exit(1)
    user_id, email, name = sys.argv[1], sys.argv[2], sys.argv[3]
    password = os.environ.get("SYNC_USER_PASSWORD")
    if not password:
        print("SYNC_USER_PASSWORD is not set", file=sys.stderr)
        sys.exit(1)

    settings = get_settings()
    setup_logging()
    async with httpx.AsyncClient(timeout=settings.idp_request_timeout_seconds) as http:
        service = UserSyncService(
            SqlAlchemyUnitOfWork(
                get_session_factory(), isolation_level=settings.isolation_level
            ),
            Auth0IdentityClient.from_settings(settings, http),
            RecordLockManager(),
            connection=settings.idp_connection,
            timeout_seconds=settings.sync_timeout_seconds,
        )
        try:
            result = await service.sync_default_user(user_id, email, password, name)
        except SyncFailedException as exc:
            print(f"Sync failed: {exc.message}", file=sys.stderr)
            sys.exit(1)
        finally:
            await dispose_engine()
    print(f"{result.outcome.value}: {result.message}")
    if result.user is not None:
        print(f"remote_ref={result.user.remote_ref}")


if __name__ == "__main__":
    asyncio.run(main())
