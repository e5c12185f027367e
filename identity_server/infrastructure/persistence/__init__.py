"""Persistence: engine/session, ORM models, repositories, unit of work, record locks."""

from identity_server.infrastructure.persistence.locking import RecordLockManager
from identity_server.infrastructure.persistence.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StoreTransaction,
)

__all__ = ["RecordLockManager", "SqlAlchemyUnitOfWork", "StoreTransaction"]
