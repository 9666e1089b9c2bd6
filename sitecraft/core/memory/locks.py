"""Per-key write serialization and versioned read-modify-write.

Two layers close the lost-update race on memory records:

1. ``KeyedLocks`` serializes writers to the same key inside one process.
2. ``write_versioned`` re-reads and retries when the repository reports a
   version conflict, which catches writers in *other* processes.
"""
from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Awaitable, Callable, TypeVar

from sitecraft.core.errors import MemoryConflictError
from sitecraft.core.memory.models import VersionedModel

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 3

R = TypeVar("R", bound=VersionedModel)


class KeyedLocks:
    """A lazily-created ``asyncio.Lock`` per key.

    Locks nobody holds or waits on are dropped automatically.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def __call__(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


memory_locks = KeyedLocks()


async def write_versioned(
    key: str,
    lock: asyncio.Lock,
    load: Callable[[], Awaitable[R]],
    save: Callable[[R, int], Awaitable[R | None]],
    mutate: Callable[[R], None],
) -> R:
    """Apply *mutate* to the record behind *key* and store it.

    *load* returns the current record; *save* stores a record if its stored
    version still equals the given one, returning ``None`` otherwise.
    *mutate* edits a private copy in place.

    Raises:
        MemoryConflictError: every attempt lost the version check.
    """
    async with lock:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            current = await load()
            expected = current.version
            working = current.model_copy(deep=True)
            mutate(working)
            stored = await save(working, expected)
            if stored is not None:
                return stored
            logger.warning(f"Version conflict on {key} (attempt {attempt}/{MAX_WRITE_ATTEMPTS})")
    raise MemoryConflictError(key, MAX_WRITE_ATTEMPTS)
