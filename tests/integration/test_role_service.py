"""RoleService against a SQLite store (case-insensitive codes, soft delete, search)."""

import pytest

from identity_server.application.dtos.role import RoleSearchFilter
from identity_server.domain.exceptions import DeletedRoleException, RoleAlreadyExistsException


async def test_reserved_roles_are_seeded(role_service) -> None:
    codes = [r.code for r in await role_service.list_active_roles()]
    assert codes == ["ADMIN", "USER"]


async def test_role_codes_are_unique_case_insensitively(role_service) -> None:
    with pytest.raises(RoleAlreadyExistsException):
        await role_service.create_role("User", actor="admin-1")


async def test_deleted_role_code_is_still_taken(role_service) -> None:
    old = await role_service.create_role("legacy", actor="admin-1")
    await role_service.delete_role(old.id, actor="admin-1")

    with pytest.raises(RoleAlreadyExistsException):
        await role_service.create_role("LEGACY", actor="admin-1")


async def test_update_description_and_audit(role_service) -> None:
    role = await role_service.create_role("editor", "Edits things", actor="admin-1")

    updated = await role_service.update_description(role.id, "Edits content", actor="admin-2")

    assert updated.description == "Edits content"
    assert updated.created_by == "admin-1"
    assert updated.updated_by == "admin-2"


async def test_deleted_role_is_hidden_from_get_and_active_list(role_service) -> None:
    role = await role_service.create_role("temp", actor="admin-1")
    await role_service.delete_role(role.id, actor="admin-1")

    with pytest.raises(DeletedRoleException):
        await role_service.get_role(role.id)
    assert "TEMP" not in [r.code for r in await role_service.list_active_roles()]


async def test_bulk_delete_never_deletes_reserved_roles(role_service) -> None:
    reserved = [r.id for r in await role_service.list_active_roles()]
    extra = await role_service.create_role("extra", actor="admin-1")

    count = await role_service.bulk_delete_roles(reserved + [extra.id, "unknown"], actor="admin-1")

    assert count == 1
    assert [r.code for r in await role_service.list_active_roles()] == ["ADMIN", "USER"]


async def test_search_roles_by_description(role_service) -> None:
    await role_service.create_role("auditor", "Reads audit logs", actor="admin-1")
    await role_service.create_role("support", "Helps customers", actor="admin-1")

    page = await role_service.search_roles(RoleSearchFilter(search="audit"))

    assert page.total == 1
    assert page.items[0].code == "AUDITOR"
