"""Seed reserved roles and the default admin row.

The admin row is inserted unsynced (remote_ref NULL); sync_default_user links
it to an IdP identity at startup or via scripts/sync_default_user.py.
"""

import logging
from typing import Any

from identity_server.core.constants import ROLE_ADMIN, ROLE_USER, SYSTEM_ACTOR
from identity_server.infrastructure.persistence.models.user import User

logger = logging.getLogger(__name__)

_DEFAULT_ROLES = {
    ROLE_USER: "Default role assigned to every account",
    ROLE_ADMIN: "Administrator",
}


async def seed_roles(tx: Any) -> list[str]:
    """Create USER and ADMIN when missing. Returns the codes created."""
    created = []
    for code, description in _DEFAULT_ROLES.items():
        if await tx.roles.exists_by_code(code):
            continue
        await tx.roles.create_role(code=code, description=description, actor=SYSTEM_ACTOR)
        created.append(code)
    return created


async def seed_default_admin(
    tx: Any, *, user_id: str, username: str, email: str, display_name: str | None
) -> bool:
    """Insert the admin row with USER and ADMIN roles. False when the id or email already exists."""
    if await tx.users.get_by_id(user_id) is not None:
        return False
    if await tx.users.get_by_email(email) is not None:
        logger.warning("Email %s already used by another user; admin row not seeded", email)
        return False
    roles = [await tx.roles.get_by_code(ROLE_USER), await tx.roles.get_by_code(ROLE_ADMIN)]
    admin = User(
        id=user_id,
        username=username,
        email=email,
        display_name=display_name,
        activated=True,
        is_deleted=False,
        roles=[r for r in roles if r is not None],
        created_by=SYSTEM_ACTOR,
        updated_by=SYSTEM_ACTOR,
    )
    await tx.users.create(admin)
    return True
