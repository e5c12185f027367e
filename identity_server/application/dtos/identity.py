"""DTOs exchanged with the remote identity provider.

RemoteIdentity is a value object: it is never persisted on its own, only
remote_ref (user_id) and avatar (picture) are projected onto the local user.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteIdentity:
    """Identity as reported by the IdP."""

    user_id: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    blocked: bool = False
    email_verified: bool = False
    phone_verified: bool | None = None
    connection: str | None = None


@dataclass(frozen=True)
class CreateIdentityRequest:
    """Fields sent when creating a remote identity on a database connection."""

    email: str
    password: str
    name: str | None
    connection: str
    email_verified: bool = False
    verify_email: bool | None = None
    blocked: bool = False


@dataclass(frozen=True)
class UpdateIdentityRequest:
    """Partial update; None fields are left unchanged at the IdP."""

    name: str | None = None
    password: str | None = None
    email: str | None = None
    blocked: bool | None = None
