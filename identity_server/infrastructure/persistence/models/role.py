"""Role ORM model. Default authorities assigned to users (USER, ADMIN, ...)."""

from sqlalchemy import Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from identity_server.infrastructure.persistence.database import Base
from identity_server.infrastructure.persistence.models.mixins import AuditedModel


class Role(AuditedModel, Base):
    """Role. Table: role. Code unique case-insensitively (functional index on lower(code))."""

    __tablename__ = "role"

    code: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


Index("uq_role_code_lower", func.lower(Role.code), unique=True)
