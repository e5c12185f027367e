"""Map persisted rows (ORM or any attribute-bearing object) to application DTOs."""

from typing import Any

from identity_server.application.dtos.role import RoleResult
from identity_server.application.dtos.user import RoleRef, UserResult
from identity_server.shared.utils.datetime import ensure_utc


def user_to_result(u: Any) -> UserResult:
    """Build UserResult from a user row. Roles sorted by code for stable output."""
    roles = tuple(
        RoleRef(id=r.id, code=r.code) for r in sorted(u.roles, key=lambda r: r.code)
    )
    return UserResult(
        id=u.id,
        username=u.username,
        email=u.email,
        display_name=u.display_name,
        remote_ref=u.remote_ref,
        avatar_url=u.avatar_url,
        activated=u.activated,
        is_deleted=u.is_deleted,
        roles=roles,
        created_by=u.created_by,
        created_at=ensure_utc(u.created_at),
        updated_by=u.updated_by,
        updated_at=ensure_utc(u.updated_at),
    )


def role_to_result(r: Any) -> RoleResult:
    """Build RoleResult from a role row."""
    return RoleResult(
        id=r.id,
        code=r.code,
        description=r.description,
        is_deleted=r.is_deleted,
        created_by=r.created_by,
        created_at=ensure_utc(r.created_at),
        updated_by=r.updated_by,
        updated_at=ensure_utc(r.updated_at),
    )
