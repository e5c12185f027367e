"""Application DTOs (plain dataclasses, no ORM or HTTP types)."""

from identity_server.application.dtos.identity import (
    CreateIdentityRequest,
    RemoteIdentity,
    UpdateIdentityRequest,
)
from identity_server.application.dtos.page import Page
from identity_server.application.dtos.role import RoleResult, RoleSearchFilter
from identity_server.application.dtos.sync import SyncResult
from identity_server.application.dtos.user import (
    RoleRef,
    UserResult,
    UserSearchFilter,
)

__all__ = [
    "CreateIdentityRequest",
    "Page",
    "RemoteIdentity",
    "RoleRef",
    "RoleResult",
    "RoleSearchFilter",
    "SyncResult",
    "UpdateIdentityRequest",
    "UserResult",
    "UserSearchFilter",
]
