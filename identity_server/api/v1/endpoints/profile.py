"""Profile API: the caller's own user, keyed by the remote reference from the gateway."""

from typing import Annotated

from fastapi import APIRouter, Depends

from identity_server.api.v1.dependencies import (
    get_subject,
    get_user_admin_service,
    get_user_sync_service,
)
from identity_server.application.services.user_admin_service import UserAdminService
from identity_server.application.services.user_sync_service import UserSyncService
from identity_server.schemas.user import (
    LoginSyncRequest,
    SyncResultResponse,
    UpdateProfileRequest,
    UserResponse,
)

router = APIRouter()


@router.get("", response_model=UserResponse)
async def get_profile(
    subject: Annotated[str, Depends(get_subject)],
    service: UserAdminService = Depends(get_user_admin_service),
):
    """Return the caller's profile (deleted accounts are rejected)."""
    return UserResponse.model_validate(await service.get_profile(subject))


@router.put("", response_model=SyncResultResponse)
async def update_profile(
    body: UpdateProfileRequest,
    subject: Annotated[str, Depends(get_subject)],
    service: UserSyncService = Depends(get_user_sync_service),
):
    """Update display name (and password). 502 REMOTE_STATE_DIVERGED means saved locally, retry."""
    result = await service.update_profile(subject, body.name, body.password, actor=subject)
    return SyncResultResponse.model_validate(result)


@router.post("/login-sync", response_model=SyncResultResponse)
async def login_sync(
    body: LoginSyncRequest,
    subject: Annotated[str, Depends(get_subject)],
    service: UserSyncService = Depends(get_user_sync_service),
):
    """Ensure a local user exists for the caller's IdP identity (first login)."""
    result = await service.register_remote_login(
        subject, str(body.email), body.name, body.picture, actor=subject
    )
    return SyncResultResponse.model_validate(result)
