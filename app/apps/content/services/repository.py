"""
Content repositories and the failover wrapper that chains them
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)


class ContentRepository(ABC):
    """
    Key/value store for JSON content.

    get() returns None when the id is absent or unreadable; put() reports
    success as a bool. Neither raises.
    """

    name: str = "repository"

    @abstractmethod
    async def get(self, content_id: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def put(self, content_id: str, value: Any) -> bool:
        ...


class FailoverRepository(ContentRepository):
    """
    Ordered chain of repositories (primary first).

    Reads return the first backend that has the id, writes go to every
    backend.
    """

    name = "failover"

    def __init__(self, backends: Sequence[ContentRepository]):
        if not backends:
            raise ValueError("FailoverRepository needs at least one backend")
        self.backends: List[ContentRepository] = list(backends)

    @property
    def primary(self) -> ContentRepository:
        return self.backends[0]

    async def get(self, content_id: str) -> Optional[Any]:
        for backend in self.backends:
            value = await backend.get(content_id)
            if value is not None:
                return value
            logger.debug(f"{content_id} not found in {backend.name}")
        return None

    async def get_all(self, content_id: str) -> List[Tuple[ContentRepository, Any]]:
        """Every backend's copy of the id, in backend order"""
        found = []
        for backend in self.backends:
            value = await backend.get(content_id)
            if value is not None:
                found.append((backend, value))
        return found

    async def put_each(self, content_id: str, value: Any) -> Dict[str, bool]:
        """Write to every backend and report success per backend name"""
        results = {}
        for backend in self.backends:
            results[backend.name] = await backend.put(content_id, value)
        if not any(results.values()):
            logger.error(f"Failed to save {content_id} to any store: {results}")
        return results

    async def put(self, content_id: str, value: Any) -> bool:
        results = await self.put_each(content_id, value)
        return any(results.values())
