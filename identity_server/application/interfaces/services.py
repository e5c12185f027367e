"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure services (DIP).
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from identity_server.application.dtos.identity import (
        CreateIdentityRequest,
        RemoteIdentity,
        UpdateIdentityRequest,
    )


class IIdentityProviderClient(Protocol):
    """Protocol for the remote identity provider.

    Every call accepts an optional per-call timeout (seconds). Transport
    failures and non-2xx answers raise IdentityProviderException; lookups
    return None for "not found".
    """

    async def acquire_service_token(self, *, timeout: float | None = None) -> str:
        """Return a bearer token for the management API (cached until near expiry)."""

    async def create_identity(
        self, request: CreateIdentityRequest, *, timeout: float | None = None
    ) -> RemoteIdentity:
        """Create a remote identity."""

    async def get_identity_by_reference(
        self, remote_ref: str, *, timeout: float | None = None
    ) -> RemoteIdentity | None:
        """Return the identity or None when the IdP reports it missing."""

    async def get_identity_by_email(
        self, email: str, *, timeout: float | None = None
    ) -> RemoteIdentity | None:
        """Return the first identity with this email or None."""

    async def update_identity(
        self,
        remote_ref: str,
        request: UpdateIdentityRequest,
        *,
        timeout: float | None = None,
    ) -> RemoteIdentity:
        """Apply a partial update."""

    async def set_blocked(
        self, remote_ref: str, blocked: bool, *, timeout: float | None = None
    ) -> None:
        """Block or unblock the identity."""

    async def delete_identity(
        self, remote_ref: str, *, timeout: float | None = None
    ) -> None:
        """Delete the identity (missing identities count as deleted)."""


class IRecordLocks(Protocol):
    """Exclusive, scoped lock per record key."""

    def hold(self, key: str) -> AbstractAsyncContextManager[None]:
        """Acquire the lock for key; released on every exit path."""
