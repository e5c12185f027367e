"""Core constants: reserved role codes, audit actors and user-facing messages.

Single source of truth for literal values shared by services and routes.
"""

# Reserved role codes. USER is assigned to every new account; both are exempt
# from bulk deletion.
ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
SYSTEM_ROLE_CODES = frozenset({ROLE_USER, ROLE_ADMIN})

# Audit actors used when no authenticated caller exists.
SYSTEM_ACTOR = "SYSTEM"
SYNC_ACTOR = "IDP_SYNC"

# In-process lock key prefix for inserts keyed by email (no row to lock yet).
EMAIL_LOCK_PREFIX = "email:"

# Messages carried on SyncResult and API responses
CREATE_USER_SUCCESS = "User created successfully."
UPDATE_USER_SUCCESS = "User updated successfully."
DELETE_USER_SUCCESS = "User deleted successfully."
ACTIVATE_USER_SUCCESS = "User activated successfully."
USER_REACTIVATED_SUCCESS = "User reactivated successfully."
USER_SYNCED_SUCCESS = "User synchronized with identity provider."
USER_ALREADY_SYNCED = "User already synchronized with identity provider."
USER_NOT_FOUND_NOTHING_TO_SYNC = "User not found; nothing to synchronize."
USER_ALREADY_EXISTS = "User already exists."
DELETE_USER_REMOTE_DIVERGED = (
    "User deleted locally but the identity provider could not block the account; retry recommended."
)
PARTIALLY_APPLIED_RETRY = "Change was applied locally but not at the identity provider; please retry."
