import asyncio
from typing import Awaitable, Callable

from src.config.logger_config import logger

CollectionLookup = Callable[[str], Awaitable[str]]


class CollectionNameCache:
    """Memoized collection id -> display name lookup.

    The lock only guards the mapping; it is released while the lookup runs, so
    two concurrent first-time resolutions of one id may both hit the network.
    Both store the same name and later calls are served from the cache.
    Entries never expire.
    """

    def __init__(self, lookup: CollectionLookup) -> None:
        self._lookup = lookup
        self._names: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def resolve(self, collection_id: str) -> str:
        async with self._lock:
            name = self._names.get(collection_id)
        if name is not None:
            return name

        name = await self._lookup(collection_id)

        async with self._lock:
            self._names[collection_id] = name
        logger.debug("Cached collection name {!r} for {}", name, collection_id)
        return name

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, collection_id: object) -> bool:
        return collection_id in self._names
