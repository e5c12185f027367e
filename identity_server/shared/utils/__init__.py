"""Shared utilities: datetime and generators."""

from identity_server.shared.utils.datetime import ensure_utc, utc_now
from identity_server.shared.utils.generators import (
    generate_cuid,
    generate_temporary_password,
)

__all__ = [
    "generate_cuid",
    "generate_temporary_password",
    "utc_now",
    "ensure_utc",
]
