"""
Serialized execution of composite-document writers
"""
import asyncio
from typing import Any, Awaitable, Callable, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WriteQueue:
    """
    Runs writers one at a time in submission order.

    asyncio.Lock hands ownership to waiters first-in first-out, so each
    writer starts only after the previous one has persisted. A failing
    writer is logged and its caller gets ``default``; later writers still run.
    """

    def __init__(self, name: str = "content-struct"):
        self.name = name
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Writers submitted and not yet finished"""
        return self._pending

    async def run_exclusive(self, writer: Callable[[], Awaitable[T]], default: Any = False) -> T:
        self._pending += 1
        try:
            async with self._lock:
                try:
                    return await writer()
                except Exception as e:
                    logger.error(f"Queued writer failed on {self.name}: {e}", exc_info=True)
                    return default
        finally:
            self._pending -= 1
