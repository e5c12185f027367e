"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller's identity and application
services. Services are built per request from the long-lived objects the
lifespan stores on app.state (unit of work, identity client, record locks);
routes depend only on these dependencies, not on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request

from identity_server.application.services.role_service import RoleService
from identity_server.application.services.user_admin_service import UserAdminService
from identity_server.application.services.user_sync_service import UserSyncService
from identity_server.core.config import get_settings
from identity_server.core.constants import SYSTEM_ACTOR
from identity_server.domain.exceptions import AuthenticationException


def get_unit_of_work(request: Request) -> Any:
    return request.app.state.unit_of_work


def get_record_locks(request: Request) -> Any:
    return request.app.state.record_locks


def get_identity_client(request: Request) -> Any:
    return request.app.state.identity_client


def get_actor(request: Request) -> str:
    """Audit actor from the configured header (set by the upstream gateway); SYSTEM when absent."""
    value = request.headers.get(get_settings().actor_header_name, "").strip()
    return value or SYSTEM_ACTOR


def get_subject(request: Request) -> str:
    """Caller's remote reference from the configured header; 401 when absent."""
    name = get_settings().subject_header_name
    value = request.headers.get(name, "").strip()
    if not value:
        raise AuthenticationException(f"Missing required header: {name}")
    return value


def get_user_sync_service(
    unit_of_work: Annotated[Any, Depends(get_unit_of_work)],
    identity_client: Annotated[Any, Depends(get_identity_client)],
    locks: Annotated[Any, Depends(get_record_locks)],
) -> UserSyncService:
    settings = get_settings()
    return UserSyncService(
        unit_of_work,
        identity_client,
        locks,
        connection=settings.idp_connection,
        timeout_seconds=settings.sync_timeout_seconds,
    )


def get_user_admin_service(
    unit_of_work: Annotated[Any, Depends(get_unit_of_work)],
    locks: Annotated[Any, Depends(get_record_locks)],
) -> UserAdminService:
    return UserAdminService(unit_of_work, locks)


def get_role_service(
    unit_of_work: Annotated[Any, Depends(get_unit_of_work)],
) -> RoleService:
    return RoleService(unit_of_work)

