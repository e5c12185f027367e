"""User ORM model and the user_role association table."""

from sqlalchemy import Boolean, Column, ForeignKey, String, Table, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from identity_server.infrastructure.persistence.database import Base
from identity_server.infrastructure.persistence.models.mixins import AuditedModel
from identity_server.infrastructure.persistence.models.role import Role

user_role = Table(
    "user_role",
    Base.metadata,
    Column(
        "user_id",
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        String,
        ForeignKey("role.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class User(AuditedModel, Base):
    """User. Table: users. Unique username, email and (when set) remote_ref.

    remote_ref is null until the row is linked to an IdP identity. A
    soft-deleted row always has activated=False.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    remote_ref: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    avatar_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    activated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    roles: Mapped[list[Role]] = relationship(
        Role, secondary=user_role, lazy="selectin", order_by=Role.code
    )
