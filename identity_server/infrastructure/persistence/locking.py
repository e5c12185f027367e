"""In-process exclusive locks keyed by record id.

Taken before the database transaction starts so callers in this process queue
up instead of racing to the row lock (and, under SERIALIZABLE, failing with
serialization errors). Callers in other processes are serialized by the row
lock (SELECT ... FOR UPDATE) that the repositories take inside the transaction.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class RecordLockManager:
    """Per-key asyncio locks, dropped from the registry once nobody holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[str, _LockEntry] = {}
        self._global_lock = asyncio.Lock()

    async def _checkout(self, key: str) -> _LockEntry:
        """Get or create the entry for key and register the caller (thread-safe)."""
        async with self._global_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _LockEntry()
            entry.holders += 1
            return entry

    async def _checkin(self, key: str, entry: _LockEntry) -> None:
        async with self._global_lock:
            entry.holders -= 1
            if entry.holders == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the exclusive lock for key; released on every exit path, including cancellation."""
        entry = await self._checkout(key)
        try:
            async with entry.lock:
                logger.debug("Record lock acquired: %s", key)
                yield
        finally:
            await asyncio.shield(self._checkin(key, entry))

    def is_held(self, key: str) -> bool:
        """True while some caller holds or waits for key."""
        return key in self._locks
