"""RoleService unit tests with AsyncMock repositories."""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from identity_server.application.services.role_service import RoleService
from identity_server.domain.exceptions import (
    DeletedRoleException,
    InvariantViolationException,
    ResourceNotFoundException,
    RoleAlreadyExistsException,
    ValidationException,
)


class _FakeUnitOfWork:
    def __init__(self) -> None:
        self.tx = SimpleNamespace(roles=AsyncMock(), users=AsyncMock())
        self.opened = 0

    @asynccontextmanager
    async def transaction(self):
        self.opened += 1
        yield self.tx


def _role(role_id: str, code: str, *, deleted: bool = False) -> SimpleNamespace:
    return SimpleNamespace(
        id=role_id,
        code=code,
        description=None,
        is_deleted=deleted,
        created_by="SYSTEM",
        created_at=None,
        updated_by="SYSTEM",
        updated_at=None,
    )


@pytest.fixture
def uow() -> _FakeUnitOfWork:
    return _FakeUnitOfWork()


async def test_create_role_normalizes_code(uow) -> None:
    uow.tx.roles.exists_by_code.return_value = False
    uow.tx.roles.create_role.return_value = _role("r-1", "EDITOR")

    result = await RoleService(uow).create_role("  editor ", "Edits", actor="admin-1")

    assert result.code == "EDITOR"
    uow.tx.roles.exists_by_code.assert_awaited_once_with("EDITOR")
    uow.tx.roles.create_role.assert_awaited_once_with(code="EDITOR", description="Edits", actor="admin-1")


async def test_create_role_blank_code_is_rejected_before_store(uow) -> None:
    with pytest.raises(ValidationException):
        await RoleService(uow).create_role("   ", actor="admin-1")

    assert uow.opened == 0


async def test_create_role_existing_code_conflicts(uow) -> None:
    uow.tx.roles.exists_by_code.return_value = True

    with pytest.raises(RoleAlreadyExistsException):
        await RoleService(uow).create_role("user", actor="admin-1")

    uow.tx.roles.create_role.assert_not_awaited()


async def test_get_role_rejects_deleted(uow) -> None:
    uow.tx.roles.get_by_id.return_value = _role("r-1", "EDITOR", deleted=True)

    with pytest.raises(DeletedRoleException):
        await RoleService(uow).get_role("r-1")


async def test_update_description_of_missing_role_is_not_found(uow) -> None:
    uow.tx.roles.get_by_id.return_value = None

    with pytest.raises(ResourceNotFoundException):
        await RoleService(uow).update_description("r-x", "text", actor="admin-1")


async def test_delete_role_twice_is_invariant_violation(uow) -> None:
    uow.tx.roles.get_by_id.return_value = _role("r-1", "EDITOR", deleted=True)

    with pytest.raises(InvariantViolationException) as exc_info:
        await RoleService(uow).delete_role("r-1", actor="admin-1")

    assert exc_info.value.error_code == "ROLE_ALREADY_DELETED"
    uow.tx.roles.save.assert_not_awaited()


async def test_bulk_delete_skips_system_and_deleted_roles(uow) -> None:
    editor = _role("r-3", "EDITOR")
    uow.tx.roles.get_many.return_value = [
        _role("r-1", "USER"),
        _role("r-2", "ADMIN"),
        editor,
        _role("r-4", "OLD", deleted=True),
    ]

    count = await RoleService(uow).bulk_delete_roles(["r-1", "r-2", "r-3", "r-4", "r-3"], actor="admin-1")

    assert count == 1
    assert editor.is_deleted is True
    uow.tx.roles.get_many.assert_awaited_once_with(["r-1", "r-2", "r-3", "r-4"])
    uow.tx.roles.save.assert_awaited_once_with(editor, actor="admin-1")
