"""Application services: synchronization engine and administrative use cases."""

from identity_server.application.services.role_service import RoleService
from identity_server.application.services.user_admin_service import UserAdminService
from identity_server.application.services.user_sync_service import UserSyncService

__all__ = ["RoleService", "UserAdminService", "UserSyncService"]
