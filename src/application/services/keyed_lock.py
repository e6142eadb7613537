"""Per-entity asyncio locks.

Read-modify-write operations on one action or election run inside a
critical section keyed by that entity's identifier. Operations on
different entities never contend. A key's lock is dropped once no task
holds or waits for it, so the registry does not grow with the number of
entities ever touched.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLock:
    """Registry of asyncio locks addressed by key.

    Example:
        >>> locks = KeyedLock()
        >>> async with locks.hold(action_id):
        ...     action = await repo.get(action_id)
        ...     await repo.save(action.with_approval(member), action.version)
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for key for the duration of the block."""
        entry = self._entries.get(key)
        if entry is None:
            entry = _LockEntry()
            self._entries[key] = entry
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(key) is entry:
                del self._entries[key]

    @property
    def active_keys(self) -> int:
        """Number of keys currently held or awaited."""
        return len(self._entries)
