"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, ActorAuditMixin, SoftDeleteMixin and the
combined AuditedModel.

Timestamps carry both a Python-side default (so values are populated on the
instance after flush, no reload needed under asyncio) and a server default for
rows written outside the ORM (migrations, seed SQL).
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, false
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from identity_server.shared.utils.datetime import utc_now
from identity_server.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware UTC)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            onupdate=utc_now,
            server_default=func.now(),
            nullable=False,
        )


class ActorAuditMixin(TimestampMixin):
    """Mixin for who-did-it audit: created_by, updated_by (actor strings, not FKs).

    Actors come from the caller's context (user id, remote reference or SYSTEM).
    """

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft delete flag. False means visible."""

    @declared_attr
    def is_deleted(cls) -> Mapped[bool]:
        return mapped_column(
            Boolean, nullable=False, default=False, server_default=false(), index=True
        )


class AuditedModel(CuidMixin, ActorAuditMixin, SoftDeleteMixin):
    """Combined mixin: CUID + actor audit + soft delete. Common for identity models."""

    __abstract__ = True
