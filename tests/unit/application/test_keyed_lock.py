"""Unit tests for KeyedLock."""

import asyncio

from src.application.services.keyed_lock import KeyedLock


async def test_same_key_is_serialized() -> None:
    locks = KeyedLock()
    order: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("action-1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-in", "a-out", "b-in", "b-out"]


async def test_different_keys_do_not_contend() -> None:
    locks = KeyedLock()
    released = asyncio.Event()

    async def holder() -> None:
        async with locks.hold("action-1"):
            await released.wait()

    async def other() -> None:
        async with locks.hold("action-2"):
            assert locks.active_keys == 2
            released.set()

    task = asyncio.create_task(holder())
    await asyncio.sleep(0)

    await asyncio.wait_for(other(), timeout=1)
    await task

    assert locks.active_keys == 0


async def test_entries_are_dropped_after_use() -> None:
    locks = KeyedLock()

    async with locks.hold("action-1"):
        assert locks.active_keys == 1

    assert locks.active_keys == 0


async def test_entry_released_when_block_raises() -> None:
    locks = KeyedLock()

    try:
        async with locks.hold("action-1"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert locks.active_keys == 0
