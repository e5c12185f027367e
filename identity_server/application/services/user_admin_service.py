"""User administration: search, detail, profile read and bulk role assignment.

Read-only paths plus role assignment; anything that touches the IdP goes
through UserSyncService.
"""

from __future__ import annotations

import logging
from typing import Any

from identity_server.application.dtos.page import Page
from identity_server.application.dtos.user import UserResult, UserSearchFilter
from identity_server.application.mappers import user_to_result
from identity_server.domain.exceptions import (
    DeletedRoleException,
    DeletedUserException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class UserAdminService:
    """Administrative user use cases over the local store."""

    def __init__(self, unit_of_work: Any, locks: Any) -> None:
        self._uow = unit_of_work
        self._locks = locks

    async def search_users(self, criteria: UserSearchFilter) -> Page[UserResult]:
        async with self._uow.transaction() as tx:
            rows, total = await tx.users.search(criteria)
            items = [user_to_result(u) for u in rows]
        return Page(items=items, total=total, skip=criteria.skip, limit=criteria.limit)

    async def get_user_detail(self, user_id: str) -> UserResult:
        """Return the user in any delete state. Raises ResourceNotFoundException."""
        async with self._uow.transaction() as tx:
            user = await tx.users.get_by_id(user_id)
            if user is None:
                raise ResourceNotFoundException("user", user_id)
            return user_to_result(user)

    async def get_profile(self, remote_ref: str) -> UserResult:
        """Return the caller's own user by remote reference; deleted accounts are rejected."""
        async with self._uow.transaction() as tx:
            user = await tx.users.get_by_remote_ref(remote_ref)
            if user is None:
                raise ResourceNotFoundException("user", remote_ref)
            if user.is_deleted:
                logger.warning("Profile requested for deleted user: %s", remote_ref)
                raise DeletedUserException(user.id, "User account is deleted")
            return user_to_result(user)

    async def update_user_roles(
        self, user_id: str, role_ids: list[str], *, actor: str
    ) -> UserResult:
        """Replace the user's roles.

        Raises:
            ValidationException: If role_ids is empty or some ids do not exist (listed in details).
            DeletedRoleException: If any requested role is soft deleted.
            DeletedUserException: If the user is soft deleted.
        """
        wanted = list(dict.fromkeys(role_ids))
        if not wanted:
            raise ValidationException("At least one role is required", field="role_ids")
        async with self._locks.hold(user_id):
            async with self._uow.transaction() as tx:
                user = await tx.users.get_for_update(user_id)
                if user is None:
                    raise ResourceNotFoundException("user", user_id)
                if user.is_deleted:
                    logger.warning("Cannot update deleted user: %s", user_id)
                    raise DeletedUserException(user_id)
                roles = await tx.roles.get_many(wanted)
                missing = sorted(set(wanted) - {r.id for r in roles})
                if missing:
                    raise ValidationException(
                        f"Role(s) not found with ID(s): {', '.join(missing)}",
                        field="role_ids",
                        details={"missing_role_ids": missing},
                    )
                deleted = sorted(r.id for r in roles if r.is_deleted)
                if deleted:
                    raise DeletedRoleException(deleted, "Cannot assign deleted role(s)")
                await tx.users.replace_roles(user, roles, actor=actor)
                result = user_to_result(user)
        logger.info("User %s roles updated: %s", user_id, [r.code for r in result.roles])
        return result
