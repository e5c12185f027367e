"""Users API: thin routes delegating to UserSyncService and UserAdminService."""

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query

from identity_server.api.v1.dependencies import (
    get_actor,
    get_user_admin_service,
    get_user_sync_service,
)
from identity_server.application.dtos.user import UserSearchFilter
from identity_server.application.services.user_admin_service import UserAdminService
from identity_server.application.services.user_sync_service import UserSyncService
from identity_server.domain.enums import UserSortField
from identity_server.schemas.common import PageResponse
from identity_server.schemas.user import (
    SyncResultResponse,
    UpdateUserRolesRequest,
    UserActivateRequest,
    UserCreateRequest,
    UserResponse,
    UserSyncRequest,
)

router = APIRouter()


@router.post("", response_model=SyncResultResponse, status_code=201)
async def create_user(
    body: UserCreateRequest,
    actor: Annotated[str, Depends(get_actor)],
    service: UserSyncService = Depends(get_user_sync_service),
):
    """Create a user locally and at the IdP (or reactivate a deleted one with this email)."""
    result = await service.create_user(
        body.username, str(body.email), body.password, body.name, actor=actor
    )
    return SyncResultResponse.model_validate(result)


@router.get("", response_model=PageResponse[UserResponse])
async def search_users(
    search: str | None = Query(None, max_length=255),
    is_deleted: bool | None = Query(None),
    created_from: datetime | None = Query(None),
    created_to: datetime | None = Query(None),
    role_ids: list[str] = Query(default=[]),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    sort_by: UserSortField = Query(UserSortField.EMAIL),
    order: Literal["asc", "desc"] = Query("asc"),
    service: UserAdminService = Depends(get_user_admin_service),
):
    """Search users by email/username, status, created range and roles (paginated)."""
    page = await service.search_users(
        UserSearchFilter(
            search=search,
            is_deleted=is_deleted,
            created_from=created_from,
            created_to=created_to,
            role_ids=frozenset(role_ids),
            skip=skip,
            limit=limit,
            sort_by=sort_by,
            descending=order == "desc",
        )
    )
    return PageResponse[UserResponse](
        items=[UserResponse.model_validate(u) for u in page.items],
        total=page.total,
        skip=page.skip,
        limit=page.limit,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    service: UserAdminService = Depends(get_user_admin_service),
):
    """Get user detail (any delete state)."""
    return UserResponse.model_validate(await service.get_user_detail(user_id))


@router.put("/{user_id}/roles", response_model=UserResponse)
async def update_user_roles(
    user_id: str,
    body: UpdateUserRolesRequest,
    actor: Annotated[str, Depends(get_actor)],
    service: UserAdminService = Depends(get_user_admin_service),
):
    """Replace the user's roles."""
    user = await service.update_user_roles(user_id, body.role_ids, actor=actor)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=SyncResultResponse)
async def delete_user(
    user_id: str,
    actor: Annotated[str, Depends(get_actor)],
    service: UserSyncService = Depends(get_user_sync_service),
):
    """Soft delete and block at the IdP. outcome=diverged when the block failed."""
    result = await service.deactivate_user(user_id, actor=actor)
    return SyncResultResponse.model_validate(result)


@router.put("/{user_id}/activate", response_model=SyncResultResponse)
async def activate_user(
    user_id: str,
    actor: Annotated[str, Depends(get_actor)],
    body: UserActivateRequest | None = None,
    service: UserSyncService = Depends(get_user_sync_service),
):
    """Reactivate a soft-deleted user and unblock (or recreate) its IdP identity."""
    result = await service.reactivate_user(
        user_id,
        actor=actor,
        password=body.password if body else None,
        display_name=body.name if body else None,
    )
    return SyncResultResponse.model_validate(result)


@router.post("/{user_id}/sync", response_model=SyncResultResponse)
async def sync_user(
    user_id: str,
    body: UserSyncRequest,
    actor: Annotated[str, Depends(get_actor)],
    service: UserSyncService = Depends(get_user_sync_service),
):
    """Create the IdP identity of a seeded user once; no_op when missing or already synced."""
    result = await service.sync_default_user(
        user_id, str(body.email), body.password, body.name, actor=actor
    )
    return SyncResultResponse.model_validate(result)
