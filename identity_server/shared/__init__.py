"""Shared helpers: logging setup, UTC time, identifier and secret generation.

Used by domain, application, and infrastructure. No business logic.
"""

from identity_server.shared.telemetry.logging import get_logger, setup_logging
from identity_server.shared.utils import (
    ensure_utc,
    generate_cuid,
    generate_temporary_password,
    utc_now,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "generate_cuid",
    "generate_temporary_password",
    "utc_now",
    "ensure_utc",
]
