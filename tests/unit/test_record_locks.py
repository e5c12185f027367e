"""Tests for the in-process per-record lock manager."""

import asyncio

import pytest

from identity_server.infrastructure.persistence.locking import RecordLockManager


async def test_same_key_is_exclusive() -> None:
    locks = RecordLockManager()
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("user-1"):
            events.append(f"{name}:in")
            await asyncio.sleep(0.01)
            events.append(f"{name}:out")

    await asyncio.gather(worker("a"), worker("b"))

    assert events in (["a:in", "a:out", "b:in", "b:out"], ["b:in", "b:out", "a:in", "a:out"])


async def test_different_keys_do_not_block_each_other() -> None:
    locks = RecordLockManager()
    both_inside = asyncio.Event()
    inside = 0

    async def worker(key: str) -> None:
        nonlocal inside
        async with locks.hold(key):
            inside += 1
            if inside == 2:
                both_inside.set()
            await asyncio.wait_for(both_inside.wait(), timeout=1)

    await asyncio.gather(worker("user-1"), worker("user-2"))

    assert both_inside.is_set()


async def test_lock_released_and_dropped_after_exception() -> None:
    locks = RecordLockManager()

    with pytest.raises(RuntimeError):
        async with locks.hold("user-1"):
            assert locks.is_held("user-1")
            raise RuntimeError("boom")

    assert not locks.is_held("user-1")
    async with asyncio.timeout(1):
        async with locks.hold("user-1"):
            pass


async def test_cancelled_waiter_does_not_leak_entry() -> None:
    locks = RecordLockManager()
    release = asyncio.Event()

    async def holder() -> None:
        async with locks.hold("user-1"):
            await release.wait()

    holder_task = asyncio.create_task(holder())
    await asyncio.sleep(0)

    async def waiter() -> None:
        async with locks.hold("user-1"):
            pass

    waiter_task = asyncio.create_task(waiter())
    await asyncio.sleep(0.01)
    waiter_task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter_task

    release.set()
    await holder_task

    assert not locks.is_held("user-1")
