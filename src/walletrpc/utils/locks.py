"""Concurrency control for the shared token registry.

Provides an asyncio reader/writer lock: any number of readers may hold it
at once, a writer excludes everyone else. Waiting writers block new readers
so a steady stream of snapshots cannot starve enrichment.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass


class AsyncRWLock:
    """Reader/writer lock for coroutines sharing one event loop.

    Example:
        lock = AsyncRWLock(name="registry")
        async with lock.read():
            snapshot = copy.deepcopy(state)
        async with lock.write():
            state.insert(record)
    """

    def __init__(self, name: str = "rwlock"):
        self.name = name
        self._cond: Optional[asyncio.Condition] = None
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def _condition(self) -> asyncio.Condition:
        # Created lazily so the lock binds to the loop that first uses it
        if self._cond is None:
            self._cond = asyncio.Condition()
        return self._cond

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    async def _wait(self, predicate, timeout: Optional[float], mode: str) -> None:
        try:
            if timeout:
                await asyncio.wait_for(self._condition.wait_for(predicate), timeout=timeout)
            else:
                await self._condition.wait_for(predicate)
        except asyncio.TimeoutError:
            logger.warning(f"{mode} lock timeout on {self.name} after {timeout}s")
            raise LockTimeoutError(
                f"Could not acquire {mode} lock on {self.name} within {timeout}s"
            )

    async def acquire_read(self, timeout: Optional[float] = None) -> None:
        async with self._condition:
            await self._wait(
                lambda: not self._writer and self._waiting_writers == 0,
                timeout,
                "read",
            )
            self._readers += 1

    async def release_read(self) -> None:
        async with self._condition:
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    async def acquire_write(self, timeout: Optional[float] = None) -> None:
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._wait(
                    lambda: not self._writer and self._readers == 0,
                    timeout,
                    "write",
                )
            except BaseException:
                # Readers parked behind this writer must be woken up again
                self._waiting_writers -= 1
                self._condition.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True

    async def release_write(self) -> None:
        async with self._condition:
            self._writer = False
            self._condition.notify_all()

    @asynccontextmanager
    async def read(self, timeout: Optional[float] = None) -> AsyncIterator[None]:
        """Hold the lock in shared mode."""
        await self.acquire_read(timeout)
        try:
            yield
        finally:
            await self.release_read()

    @asynccontextmanager
    async def write(self, timeout: Optional[float] = None) -> AsyncIterator[None]:
        """Hold the lock exclusively."""
        await self.acquire_write(timeout)
        logger.debug(f"Write lock acquired on {self.name}")
        try:
            yield
        finally:
            await self.release_write()
            logger.debug(f"Write lock released on {self.name}")
