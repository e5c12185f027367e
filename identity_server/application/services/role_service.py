"""Role application service: create, describe, search and soft delete roles."""

from __future__ import annotations

import logging
from typing import Any

from identity_server.application.dtos.page import Page
from identity_server.application.dtos.role import RoleResult, RoleSearchFilter
from identity_server.application.mappers import role_to_result
from identity_server.core.constants import SYSTEM_ROLE_CODES
from identity_server.domain.exceptions import (
    DeletedRoleException,
    InvariantViolationException,
    ResourceNotFoundException,
    RoleAlreadyExistsException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class RoleService:
    """Role use cases. Each call runs in its own transaction."""

    def __init__(self, unit_of_work: Any) -> None:
        self._uow = unit_of_work

    async def create_role(
        self, code: str, description: str | None = None, *, actor: str
    ) -> RoleResult:
        """Create a role; code is trimmed and upper-cased.

        Raises:
            ValidationException: If code is blank.
            RoleAlreadyExistsException: If a role with the code exists (any case, any delete state).
        """
        normalized = code.strip().upper()
        if not normalized:
            raise ValidationException("Role code is required", field="code")
        async with self._uow.transaction() as tx:
            if await tx.roles.exists_by_code(normalized):
                raise RoleAlreadyExistsException(normalized)
            role = await tx.roles.create_role(code=normalized, description=description, actor=actor)
            result = role_to_result(role)
        logger.info("Role created: %s (%s)", result.code, result.id)
        return result

    async def update_description(
        self, role_id: str, description: str | None, *, actor: str
    ) -> RoleResult:
        async with self._uow.transaction() as tx:
            role = await self._get_active(tx, role_id, "Cannot update deleted role")
            role.description = description
            await tx.roles.save(role, actor=actor)
            result = role_to_result(role)
        logger.info("Role description updated: %s", role_id)
        return result

    async def get_role(self, role_id: str) -> RoleResult:
        async with self._uow.transaction() as tx:
            role = await self._get_active(tx, role_id)
            return role_to_result(role)

    async def search_roles(self, criteria: RoleSearchFilter) -> Page[RoleResult]:
        async with self._uow.transaction() as tx:
            rows, total = await tx.roles.search(criteria)
            items = [role_to_result(r) for r in rows]
        return Page(items=items, total=total, skip=criteria.skip, limit=criteria.limit)

    async def delete_role(self, role_id: str, *, actor: str) -> None:
        """Soft delete one role. Already deleted is an invariant violation."""
        async with self._uow.transaction() as tx:
            role = await tx.roles.get_by_id(role_id)
            if role is None:
                raise ResourceNotFoundException("role", role_id)
            if role.is_deleted:
                raise InvariantViolationException(
                    "Role is already deleted", "ROLE_ALREADY_DELETED", {"role_id": role_id}
                )
            role.is_deleted = True
            await tx.roles.save(role, actor=actor)
        logger.info("Role soft deleted: %s", role_id)

    async def bulk_delete_roles(self, role_ids: list[str], *, actor: str) -> int:
        """Soft delete roles; system roles (USER, ADMIN), unknown and deleted ids are skipped.

        Returns:
            Number of roles deleted.
        """
        async with self._uow.transaction() as tx:
            roles = await tx.roles.get_many(list(dict.fromkeys(role_ids)))
            to_delete = [
                r
                for r in roles
                if r.code.upper() not in SYSTEM_ROLE_CODES and not r.is_deleted
            ]
            for role in to_delete:
                role.is_deleted = True
                await tx.roles.save(role, actor=actor)
        logger.info(
            "Soft deleted %d role(s); %d skipped (system roles, unknown or already deleted)",
            len(to_delete),
            len(role_ids) - len(to_delete),
        )
        return len(to_delete)

    async def list_active_roles(self) -> list[RoleResult]:
        async with self._uow.transaction() as tx:
            roles = await tx.roles.list_active()
            return [role_to_result(r) for r in roles]

    @staticmethod
    async def _get_active(tx: Any, role_id: str, deleted_message: str = "Role has been deleted") -> Any:
        role = await tx.roles.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException("role", role_id)
        if role.is_deleted:
            raise DeletedRoleException([role_id], deleted_message)
        return role
