"""Domain enumerations."""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class SyncOutcome(_ValuesMixin, str, Enum):
    """Result of a synchronization entry point.

    APPLIED: local and remote both reflect the change.
    NO_OP: nothing to do (already synced, or no local row).
    DIVERGED: local change committed, remote change failed; retry recommended.
    """

    APPLIED = "applied"
    NO_OP = "no_op"
    DIVERGED = "diverged"


class UserSortField(_ValuesMixin, str, Enum):
    """Sortable user columns for search."""

    EMAIL = "email"
    USERNAME = "username"
    CREATED_AT = "created_at"
    STATUS = "is_deleted"


class RoleSortField(_ValuesMixin, str, Enum):
    """Sortable role columns for search."""

    CODE = "code"
    DESCRIPTION = "description"
    CREATED_AT = "created_at"
    STATUS = "is_deleted"
