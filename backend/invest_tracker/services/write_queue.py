"""
Serialized write discipline for stores.

Each logical store owns one WriteQueue. Every write runs its whole
read-modify-write cycle while holding the queue, so two writers can never
both act on the same stale state. Readers do not take the queue.

Usage:
    queue = WriteQueue("investments")

    async with queue:
        data = load()
        data.append(item)
        save(data)

    # or
    result = await queue.run(some_coroutine_function, arg)
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class WriteQueue:
    """FIFO mutual exclusion for the writes of one store."""

    def __init__(self, name: str):
        self.name = name
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of writes currently holding or waiting for the queue."""
        return self._pending

    def locked(self) -> bool:
        return self._lock.locked()

    async def __aenter__(self) -> "WriteQueue":
        self._pending += 1
        if self._lock.locked():
            logger.debug(f"Write queue '{self.name}': waiting ({self._pending} pending)")
        try:
            await self._lock.acquire()
        except BaseException:
            self._pending -= 1
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._pending -= 1
        self._lock.release()

    async def run(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Run `func(*args, **kwargs)` as one serialized write."""
        async with self:
            return await func(*args, **kwargs)

    def __repr__(self) -> str:
        return f"WriteQueue(name={self.name!r}, pending={self._pending})"
