"""Result of a synchronization engine entry point."""

from dataclasses import dataclass

from identity_server.application.dtos.identity import RemoteIdentity
from identity_server.application.dtos.user import UserResult
from identity_server.domain.enums import SyncOutcome


@dataclass(frozen=True)
class SyncResult:
    """Outcome plus the local user state after the operation.

    user is None only for NO_OP results where no local row exists.
    remote_identity is set when the IdP was read or written during the call.
    """

    outcome: SyncOutcome
    message: str
    user: UserResult | None = None
    remote_identity: RemoteIdentity | None = None

    @property
    def applied(self) -> bool:
        return self.outcome is SyncOutcome.APPLIED

    @property
    def diverged(self) -> bool:
        return self.outcome is SyncOutcome.DIVERGED
