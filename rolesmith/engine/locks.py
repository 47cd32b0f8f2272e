"""
rolesmith.engine.locks — Per-Key asyncio Locks
===============================================

Serializes work for one identity (a menu, or a member on a menu) while
letting unrelated identities proceed concurrently.  Entries are dropped
once nobody holds or waits on them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """A dictionary of :class:`asyncio.Lock` objects created on demand."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def menu_key(menu_id: int) -> tuple[str, int]:
    return ("menu", menu_id)


def member_key(guild_id: int, member_id: int, menu_id: int | None) -> tuple:
    return ("member", guild_id, member_id, menu_id)
