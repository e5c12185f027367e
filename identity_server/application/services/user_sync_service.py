"""Synchronization engine: keeps local users consistent with the remote IdP.

Every entry point serializes on the affected record: an in-process lock per
key (user id, or email for inserts) is taken first, then the row lock inside
the transaction. Remote failure policy differs per operation:

- sync_default_user / create_user (new row): remote failure aborts and rolls
  back the local transaction; a remote identity created before a failed
  commit is deleted again (compensation).
- reactivate_user / update_profile: local change commits, remote failure is
  raised afterwards as RemoteStateDivergedException.
- deactivate_user: local soft delete commits, remote block is best effort and
  a failure is reported as SyncOutcome.DIVERGED.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from typing import Any

from identity_server.application.dtos.identity import (
    CreateIdentityRequest,
    RemoteIdentity,
    UpdateIdentityRequest,
)
from identity_server.application.dtos.sync import SyncResult
from identity_server.application.mappers import user_to_result
from identity_server.core.constants import (
    CREATE_USER_SUCCESS,
    DELETE_USER_REMOTE_DIVERGED,
    DELETE_USER_SUCCESS,
    EMAIL_LOCK_PREFIX,
    ROLE_USER,
    SYNC_ACTOR,
    SYSTEM_ACTOR,
    UPDATE_USER_SUCCESS,
    USER_ALREADY_EXISTS,
    USER_ALREADY_SYNCED,
    USER_NOT_FOUND_NOTHING_TO_SYNC,
    USER_REACTIVATED_SUCCESS,
    USER_SYNCED_SUCCESS,
)
from identity_server.domain.enums import SyncOutcome
from identity_server.domain.exceptions import (
    DeletedUserException,
    EmailAlreadyExistsException,
    IdentityProviderException,
    IdentityServerException,
    RemoteStateDivergedException,
    ResourceNotFoundException,
    SyncFailedException,
    UserAlreadyActiveException,
    UserAlreadyDeletedException,
)
from identity_server.shared.utils.generators import generate_temporary_password

logger = logging.getLogger(__name__)


@dataclass
class _RemoteCreate:
    """Tracks one remote create so a failed local commit can be compensated."""

    email: str
    identity: RemoteIdentity | None = None
    preexisting_ref: str | None = None
    outcome_unknown: bool = False
    committed: bool = False

    @property
    def needs_compensation(self) -> bool:
        return not self.committed and (self.identity is not None or self.outcome_unknown)


class UserSyncService:
    """Orchestrates locking, ordering and compensation across local store and IdP."""

    def __init__(
        self,
        unit_of_work: Any,
        identity_client: Any,
        locks: Any,
        *,
        connection: str,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._uow = unit_of_work
        self._idp = identity_client
        self._locks = locks
        self._connection = connection
        self._timeout = timeout_seconds

    async def sync_default_user(
        self,
        user_id: str,
        email: str,
        password: str,
        display_name: str | None,
        *,
        actor: str = SYNC_ACTOR,
    ) -> SyncResult:
        """Link a pre-seeded local user to a newly created remote identity, exactly once.

        The already-synced check runs under the row lock, so concurrent callers
        for one user produce at most one remote create.
        """
        attempt = _RemoteCreate(email=email)
        async with self._locks.hold(user_id):
            async with self._fatal_on_failure(attempt, "sync_default_user", user_id):
                async with asyncio.timeout(self._timeout):
                    async with self._uow.transaction() as tx:
                        user = await tx.users.get_for_update(user_id)
                        if user is None:
                            logger.warning(
                                "Cannot sync user %s with identity provider: not found", user_id
                            )
                            return SyncResult(SyncOutcome.NO_OP, USER_NOT_FOUND_NOTHING_TO_SYNC)
                        if user.remote_ref is not None:
                            logger.info(
                                "User %s already synced (remote_ref=%s)", user_id, user.remote_ref
                            )
                            return SyncResult(
                                SyncOutcome.NO_OP, USER_ALREADY_SYNCED, user=user_to_result(user)
                            )
                        request = CreateIdentityRequest(
                            email=email,
                            password=password,
                            name=display_name,
                            connection=self._connection,
                            email_verified=True,
                            verify_email=True,
                            blocked=False,
                        )
                        identity = await self._create_remote(attempt, request)
                        await tx.users.link_remote_identity(
                            user, identity.user_id, identity.picture, actor=actor
                        )
                        result = user_to_result(user)
                    attempt.committed = True
        logger.info("Synced user %s with identity provider (remote_ref=%s)", user_id, identity.user_id)
        return SyncResult(SyncOutcome.APPLIED, USER_SYNCED_SUCCESS, user=result, remote_identity=identity)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        display_name: str | None,
        *,
        actor: str = SYSTEM_ACTOR,
    ) -> SyncResult:
        """Create a user locally and remotely, or reactivate a soft-deleted one with this email.

        Raises EmailAlreadyExistsException (no mutation) when the email belongs
        to an active user.
        """
        attempt = _RemoteCreate(email=email)
        reactivate_id: str | None = None
        async with self._locks.hold(EMAIL_LOCK_PREFIX + email):
            async with self._fatal_on_failure(attempt, "create_user"):
                async with asyncio.timeout(self._timeout):
                    async with self._uow.transaction() as tx:
                        existing = await tx.users.get_by_email(email, for_update=True)
                        if existing is None:
                            identity, result = await self._insert_and_create_remote(
                                tx, attempt, username, email, password, display_name, actor
                            )
                        elif not existing.is_deleted:
                            logger.warning("User with email %s already exists and is active", email)
                            raise EmailAlreadyExistsException(email)
                        else:
                            reactivate_id = existing.id
                    attempt.committed = True
            if reactivate_id is not None:
                logger.info("Reactivating deleted user %s for email %s", reactivate_id, email)
                try:
                    return await self.reactivate_user(
                        reactivate_id, actor=actor, password=password, display_name=display_name
                    )
                except UserAlreadyActiveException as exc:
                    raise EmailAlreadyExistsException(email) from exc
        logger.info("Created user %s (remote_ref=%s)", result.id, identity.user_id)
        return SyncResult(SyncOutcome.APPLIED, CREATE_USER_SUCCESS, user=result, remote_identity=identity)

    async def _insert_and_create_remote(
        self,
        tx: Any,
        attempt: _RemoteCreate,
        username: str,
        email: str,
        password: str,
        display_name: str | None,
        actor: str,
    ) -> tuple[RemoteIdentity, Any]:
        """Insert the row (flushed, not committed), create remotely, then link."""
        default_role = await tx.roles.get_by_code(ROLE_USER)
        if default_role is None:
            raise ResourceNotFoundException("role", ROLE_USER)
        user = await tx.users.create_user(
            username=username,
            email=email,
            display_name=display_name,
            roles=[default_role],
            actor=actor,
        )
        logger.debug("Inserted user %s, creating remote identity", user.id)
        request = CreateIdentityRequest(
            email=email,
            password=password,
            name=display_name,
            connection=self._connection,
            email_verified=False,
            blocked=False,
        )
        identity = await self._create_remote(attempt, request)
        await tx.users.link_remote_identity(user, identity.user_id, identity.picture, actor=actor)
        return identity, user_to_result(user)

    async def reactivate_user(
        self,
        user_id: str,
        *,
        actor: str = SYSTEM_ACTOR,
        password: str | None = None,
        display_name: str | None = None,
    ) -> SyncResult:
        """Restore a soft-deleted user and reconcile the remote side to unblocked.

        Remote states handled: exists (unblock), missing (create a fresh
        identity and replace the stale reference), never synced (create). The
        local restore commits even if the remote phase fails, in which case
        RemoteStateDivergedException is raised after the commit.
        """
        attempt = _RemoteCreate(email="")
        failure: Exception | None = None
        async with self._locks.hold(user_id):
            async with self._fatal_on_failure(attempt, "reactivate_user", user_id):
                async with self._uow.transaction() as tx:
                    user = await tx.users.get_for_update(user_id)
                    if user is None:
                        raise ResourceNotFoundException("user", user_id)
                    if not user.is_deleted:
                        logger.warning("User is already active: %s", user_id)
                        raise UserAlreadyActiveException(user_id)
                    await tx.users.restore(user, actor=actor)
                    attempt.email = user.email
                    logger.info("User reactivated in database: %s", user_id)
                    identity: RemoteIdentity | None = None
                    try:
                        async with asyncio.timeout(self._timeout):
                            identity = await self._reconcile_unblocked(
                                tx, user, attempt, actor, password, display_name
                            )
                    except (IdentityProviderException, TimeoutError) as exc:
                        failure = exc
                    result = user_to_result(user)
                attempt.committed = True
            if failure is not None:
                created = attempt.identity
                if attempt.outcome_unknown or (
                    created is not None and result.remote_ref != created.user_id
                ):
                    await self._compensate(attempt)
                logger.error(
                    "Reactivated user %s locally but identity provider was not reconciled: %s",
                    user_id,
                    failure,
                    exc_info=failure,
                )
                raise RemoteStateDivergedException(
                    user_id, "reactivate", str(failure) or failure.__class__.__name__
                ) from failure
        return SyncResult(
            SyncOutcome.APPLIED, USER_REACTIVATED_SUCCESS, user=result, remote_identity=identity
        )

    async def _reconcile_unblocked(
        self,
        tx: Any,
        user: Any,
        attempt: _RemoteCreate,
        actor: str,
        password: str | None,
        display_name: str | None,
    ) -> RemoteIdentity:
        if user.remote_ref is not None:
            existing = await self._idp.get_identity_by_reference(user.remote_ref)
            if existing is not None:
                await self._idp.set_blocked(user.remote_ref, False)
                logger.info("User unblocked at identity provider: %s", user.remote_ref)
                return replace(existing, blocked=False)
            logger.warning(
                "Remote identity %s of user %s is gone; creating a new one",
                user.remote_ref,
                user.id,
            )
        else:
            logger.warning("User %s has no remote identity; creating one", user.id)
        request = CreateIdentityRequest(
            email=user.email,
            password=password or generate_temporary_password(),
            name=display_name or user.display_name,
            connection=self._connection,
            email_verified=False,
            blocked=False,
        )
        identity = await self._create_remote(attempt, request)
        await tx.users.link_remote_identity(user, identity.user_id, identity.picture, actor=actor)
        logger.info("Linked user %s to new remote identity %s", user.id, identity.user_id)
        return identity

    async def deactivate_user(self, user_id: str, *, actor: str = SYSTEM_ACTOR) -> SyncResult:
        """Soft delete locally, then try to block remotely.

        Block failure never undoes the soft delete; it is logged and returned
        as SyncOutcome.DIVERGED so callers can retry.
        """
        async with self._locks.hold(user_id):
            async with self._uow.transaction() as tx:
                user = await tx.users.get_for_update(user_id)
                if user is None:
                    raise ResourceNotFoundException("user", user_id)
                if user.is_deleted:
                    logger.warning("User is already deleted: %s", user_id)
                    raise UserAlreadyDeletedException(user_id)
                await tx.users.soft_delete(user, actor=actor)
                remote_ref = user.remote_ref
                result = user_to_result(user)
            logger.info("User soft deleted in database: %s", user_id)
            if remote_ref is None:
                logger.warning("User %s has no remote identity, skipping block", user_id)
                return SyncResult(SyncOutcome.APPLIED, DELETE_USER_SUCCESS, user=result)
            try:
                async with asyncio.timeout(self._timeout):
                    await self._idp.set_blocked(remote_ref, True)
            except (IdentityProviderException, TimeoutError):
                logger.exception(
                    "Failed to block remote identity %s after deleting user %s; states diverged",
                    remote_ref,
                    user_id,
                )
                return SyncResult(SyncOutcome.DIVERGED, DELETE_USER_REMOTE_DIVERGED, user=result)
        logger.info("User blocked at identity provider: %s", remote_ref)
        return SyncResult(SyncOutcome.APPLIED, DELETE_USER_SUCCESS, user=result)

    async def update_profile(
        self,
        remote_ref: str,
        display_name: str,
        password: str | None = None,
        *,
        actor: str | None = None,
    ) -> SyncResult:
        """Update display name (and optionally password) for the user owning remote_ref.

        The local change commits before the IdP is called; if the IdP call
        fails RemoteStateDivergedException tells the caller to retry.
        """
        async with self._uow.transaction() as tx:
            found = await tx.users.get_by_remote_ref(remote_ref)
            if found is None:
                raise ResourceNotFoundException("user", remote_ref)
            user_id = found.id
        async with self._locks.hold(user_id):
            async with self._uow.transaction() as tx:
                user = await tx.users.get_for_update(user_id)
                if user is None or user.remote_ref != remote_ref:
                    raise ResourceNotFoundException("user", remote_ref)
                if user.is_deleted:
                    logger.warning("Cannot update profile for deleted user: %s", remote_ref)
                    raise DeletedUserException(user_id)
                await tx.users.update_display_name(user, display_name, actor=actor or remote_ref)
                result = user_to_result(user)
            logger.info("User profile updated in database: %s", user_id)
            try:
                async with asyncio.timeout(self._timeout):
                    identity = await self._idp.update_identity(
                        remote_ref, UpdateIdentityRequest(name=display_name, password=password)
                    )
            except (IdentityProviderException, TimeoutError) as exc:
                logger.error(
                    "Profile of user %s updated locally but not at identity provider (%s)",
                    user_id,
                    remote_ref,
                    exc_info=exc,
                )
                raise RemoteStateDivergedException(
                    user_id, "update_profile", str(exc) or exc.__class__.__name__
                ) from exc
        logger.info("User profile updated at identity provider: %s", remote_ref)
        return SyncResult(SyncOutcome.APPLIED, UPDATE_USER_SUCCESS, user=result, remote_identity=identity)

    async def register_remote_login(
        self,
        remote_ref: str,
        email: str,
        display_name: str | None = None,
        picture: str | None = None,
        *,
        actor: str | None = None,
    ) -> SyncResult:
        """Make sure a local user exists for an identity that just logged in.

        Already linked: NO_OP. An unlinked local row with the same email is
        linked; otherwise a new row with the default USER role is created
        (username = email). No IdP call is made.
        """
        actor = actor or remote_ref
        async with self._locks.hold(EMAIL_LOCK_PREFIX + email):
            async with self._uow.transaction() as tx:
                linked = await tx.users.get_by_remote_ref(remote_ref)
                if linked is not None:
                    logger.info("User with remote identity %s already exists", remote_ref)
                    return SyncResult(SyncOutcome.NO_OP, USER_ALREADY_EXISTS, user=user_to_result(linked))
                user = await tx.users.get_by_email(email, for_update=True)
                if user is not None:
                    if user.remote_ref is not None:
                        raise EmailAlreadyExistsException(email)
                    if user.is_deleted:
                        raise DeletedUserException(user.id, "User account is deleted")
                    await tx.users.link_remote_identity(user, remote_ref, picture, actor=actor)
                    message = USER_SYNCED_SUCCESS
                else:
                    default_role = await tx.roles.get_by_code(ROLE_USER)
                    if default_role is None:
                        raise ResourceNotFoundException("role", ROLE_USER)
                    user = await tx.users.create_user(
                        username=email,
                        email=email,
                        display_name=display_name,
                        roles=[default_role],
                        actor=actor,
                        remote_ref=remote_ref,
                        avatar_url=picture,
                    )
                    message = CREATE_USER_SUCCESS
                result = user_to_result(user)
        logger.info("Registered login of remote identity %s as user %s", remote_ref, result.id)
        return SyncResult(SyncOutcome.APPLIED, message, user=result)

    async def _create_remote(
        self, attempt: _RemoteCreate, request: CreateIdentityRequest
    ) -> RemoteIdentity:
        """Create the remote identity, recording the outcome on attempt.

        An identity already registered for the email is remembered first so
        compensation never deletes an account this attempt did not create.
        """
        existing = await self._idp.get_identity_by_email(request.email)
        attempt.preexisting_ref = existing.user_id if existing is not None else None
        try:
            identity = await self._idp.create_identity(request)
        except IdentityProviderException as exc:
            # No status: the request may have reached the IdP.
            attempt.outcome_unknown = exc.status_code is None
            raise
        except (TimeoutError, asyncio.CancelledError):
            attempt.outcome_unknown = True
            raise
        attempt.identity = identity
        attempt.outcome_unknown = False
        logger.info("User created at identity provider: %s", identity.user_id)
        return identity

    async def _compensate(self, attempt: _RemoteCreate) -> None:
        """Delete the remote identity created by a failed attempt; never raises."""
        ref = attempt.identity.user_id if attempt.identity is not None else None
        try:
            async with asyncio.timeout(self._timeout):
                if ref is None:
                    found = await self._idp.get_identity_by_email(attempt.email)
                    if found is None:
                        logger.info("No remote identity for %s to compensate", attempt.email)
                        return
                    if found.user_id == attempt.preexisting_ref:
                        logger.warning(
                            "Remote identity %s (%s) predates the failed attempt; not deleted",
                            found.user_id,
                            attempt.email,
                        )
                        return
                    ref = found.user_id
                await self._idp.delete_identity(ref)
        except (IdentityProviderException, TimeoutError):
            logger.exception(
                "Compensation failed: remote identity %s (%s) is orphaned and needs manual cleanup",
                ref or "<unknown>",
                attempt.email,
            )
            return
        logger.warning("Compensated failed sync: deleted remote identity %s (%s)", ref, attempt.email)

    @asynccontextmanager
    async def _fatal_on_failure(
        self, attempt: _RemoteCreate, operation: str, user_id: str | None = None
    ) -> AsyncIterator[None]:
        """Compensate a dangling remote create and turn remote/store failures into SyncFailedException.

        Domain rejections (conflict, not found, invariant) pass through unchanged.
        """
        try:
            yield
        except IdentityServerException as exc:
            if attempt.needs_compensation:
                await self._compensate(attempt)
            if not isinstance(exc, IdentityProviderException):
                raise
            logger.error("%s failed for %s, rolled back: %s", operation, user_id or attempt.email, exc)
            raise SyncFailedException(f"{operation} failed: {exc.message}", user_id=user_id) from exc
        except Exception as exc:
            if attempt.needs_compensation:
                await self._compensate(attempt)
            logger.error(
                "%s failed for %s, rolled back", operation, user_id or attempt.email, exc_info=exc
            )
            raise SyncFailedException(
                f"{operation} failed: {exc.__class__.__name__}", user_id=user_id
            ) from exc
        except asyncio.CancelledError:
            if attempt.needs_compensation:
                await asyncio.shield(self._compensate(attempt))
            logger.warning("%s cancelled for %s, rolled back", operation, user_id or attempt.email)
            raise

