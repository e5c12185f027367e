"""Repositories: SQLAlchemy implementations of the application store protocols."""

from identity_server.infrastructure.persistence.repositories.base import BaseRepository
from identity_server.infrastructure.persistence.repositories.role_repo import (
    RoleRepository,
)
from identity_server.infrastructure.persistence.repositories.user_repo import (
    UserRepository,
)

__all__ = ["BaseRepository", "RoleRepository", "UserRepository"]
