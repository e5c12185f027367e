"""Roles API: create, search, get, update description, soft delete, bulk delete."""

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response

from identity_server.api.v1.dependencies import get_actor, get_role_service
from identity_server.application.dtos.role import RoleSearchFilter
from identity_server.application.services.role_service import RoleService
from identity_server.domain.enums import RoleSortField
from identity_server.schemas.common import PageResponse
from identity_server.schemas.role import (
    BulkDeleteRolesRequest,
    BulkDeleteRolesResponse,
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=RoleResponse, status_code=201)
async def create_role(
    body: RoleCreateRequest,
    actor: Annotated[str, Depends(get_actor)],
    service: RoleService = Depends(get_role_service),
):
    """Create a role. 409 when the code exists (case-insensitive)."""
    role = await service.create_role(body.code, body.description, actor=actor)
    return RoleResponse.model_validate(role)


@router.get("", response_model=PageResponse[RoleResponse])
async def search_roles(
    search: str | None = Query(None, max_length=255),
    is_deleted: bool | None = Query(None),
    created_from: datetime | None = Query(None),
    created_to: datetime | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    sort_by: RoleSortField = Query(RoleSortField.CODE),
    order: Literal["asc", "desc"] = Query("asc"),
    service: RoleService = Depends(get_role_service),
):
    """Search roles by code/description, status and created range (paginated)."""
    page = await service.search_roles(
        RoleSearchFilter(
            search=search,
            is_deleted=is_deleted,
            created_from=created_from,
            created_to=created_to,
            skip=skip,
            limit=limit,
            sort_by=sort_by,
            descending=order == "desc",
        )
    )
    return PageResponse[RoleResponse](
        items=[RoleResponse.model_validate(r) for r in page.items],
        total=page.total,
        skip=page.skip,
        limit=page.limit,
    )


@router.get("/active", response_model=list[RoleResponse])
async def list_active_roles(service: RoleService = Depends(get_role_service)):
    """All non-deleted roles ordered by code (for role pickers)."""
    return [RoleResponse.model_validate(r) for r in await service.list_active_roles()]


@router.post("/bulk-delete", response_model=BulkDeleteRolesResponse)
async def bulk_delete_roles(
    body: BulkDeleteRolesRequest,
    actor: Annotated[str, Depends(get_actor)],
    service: RoleService = Depends(get_role_service),
):
    """Soft delete many roles; USER and ADMIN are never deleted."""
    count = await service.bulk_delete_roles(body.ids, actor=actor)
    return BulkDeleteRolesResponse(deleted_count=count)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: str, service: RoleService = Depends(get_role_service)):
    """Get a role. Deleted roles are rejected (400 ROLE_DELETED)."""
    return RoleResponse.model_validate(await service.get_role(role_id))


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    body: RoleUpdateRequest,
    actor: Annotated[str, Depends(get_actor)],
    service: RoleService = Depends(get_role_service),
):
    """Update a role's description."""
    role = await service.update_description(role_id, body.description, actor=actor)
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    actor: Annotated[str, Depends(get_actor)],
    service: RoleService = Depends(get_role_service),
):
    """Soft delete a role."""
    await service.delete_role(role_id, actor=actor)
    return Response(status_code=204)
