"""Seed the reserved roles (USER, ADMIN) and the default admin row.

Usage:
    python -m scripts.seed_defaults
Reads DEFAULT_ADMIN_USER_ID / DEFAULT_ADMIN_USERNAME / DEFAULT_ADMIN_EMAIL /
DEFAULT_ADMIN_NAME from settings; the admin row is skipped when the id or
email is unset. Run alembic upgrade head first.
"""

import asyncio
import sys

from identity_server.core.config import get_settings
from identity_server.infrastructure.persistence.database import (
    dispose_engine,
    get_session_factory,
)
from identity_server.infrastructure.persistence.seed import seed_default_admin, seed_roles
from identity_server.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


async def main() -> None:
    """Seed roles and, when configured, the default admin row."""
    settings = get_settings()
    uow = SqlAlchemyUnitOfWork(get_session_factory())
    try:
        async with uow.transaction() as tx:
            created = await seed_roles(tx)
            print(f"Roles created: {', '.join(created) or 'none'}")
            if not (settings.default_admin_user_id and settings.default_admin_email):
                print("DEFAULT_ADMIN_USER_ID / DEFAULT_ADMIN_EMAIL unset; admin row skipped", file=sys.stderr)
                return
            inserted = await seed_default_admin(
                tx,
                user_id=settings.default_admin_user_id,
                username=settings.default_admin_username,
                email=settings.default_admin_email,
                display_name=settings.default_admin_name or None,
            )
            print(
                f"Admin row {settings.default_admin_user_id}: "
                + ("created (unsynced)" if inserted else "already present")
            )
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
