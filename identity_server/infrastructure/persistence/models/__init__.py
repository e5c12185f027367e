"""Persistence models: ORM entities and mixins."""

from identity_server.infrastructure.persistence.models.mixins import (
    ActorAuditMixin,
    AuditedModel,
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from identity_server.infrastructure.persistence.models.role import Role
from identity_server.infrastructure.persistence.models.user import User, user_role

__all__ = [
    "ActorAuditMixin",
    "AuditedModel",
    "CuidMixin",
    "Role",
    "SoftDeleteMixin",
    "TimestampMixin",
    "User",
    "user_role",
]
