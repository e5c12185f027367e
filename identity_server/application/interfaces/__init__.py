"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from identity_server.infrastructure or identity_server.api.
"""

from identity_server.application.interfaces.repositories import (
    IRoleRepository,
    IStoreTransaction,
    IUnitOfWork,
    IUserRepository,
)
from identity_server.application.interfaces.services import (
    IIdentityProviderClient,
    IRecordLocks,
)

__all__ = [
    "IIdentityProviderClient",
    "IRecordLocks",
    "IRoleRepository",
    "IStoreTransaction",
    "IUnitOfWork",
    "IUserRepository",
]
