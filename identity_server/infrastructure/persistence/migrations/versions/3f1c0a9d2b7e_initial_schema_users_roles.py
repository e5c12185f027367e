"""initial_schema_users_roles

Revision ID: 3f1c0a9d2b7e
Revises:
Create Date: 2026-01-12 10:04:31.218466

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c0a9d2b7e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default="false"),
    ]


def upgrade() -> None:
    """Upgrade schema - role, users, user_role; seed USER and ADMIN roles."""

    role = op.create_table(
        "role",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("uq_role_code_lower", "role", [sa.text("lower(code)")], unique=True)
    op.create_index("ix_role_is_deleted", "role", ["is_deleted"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("remote_ref", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=2048), nullable=True),
        sa.Column("activated", sa.Boolean(), nullable=False, server_default="true"),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_remote_ref", "users", ["remote_ref"], unique=True)
    op.create_index("ix_users_is_deleted", "users", ["is_deleted"])

    op.create_table(
        "user_role",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "role_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_user_role_role_id", "user_role", ["role_id"])

    op.bulk_insert(
        role,
        [
            {
                "id": "role_user_default",
                "code": "USER",
                "description": "Default role assigned to every account",
                "created_by": "SYSTEM",
                "updated_by": "SYSTEM",
            },
            {
                "id": "role_admin_default",
                "code": "ADMIN",
                "description": "Administrator",
                "created_by": "SYSTEM",
                "updated_by": "SYSTEM",
            },
        ],
    )


def downgrade() -> None:
    """Downgrade schema - drop user_role, users, role."""
    op.drop_index("ix_user_role_role_id", table_name="user_role")
    op.drop_table("user_role")
    op.drop_index("ix_users_is_deleted", table_name="users")
    op.drop_index("ix_users_remote_ref", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_role_is_deleted", table_name="role")
    op.drop_index("uq_role_code_lower", table_name="role")
    op.drop_table("role")
