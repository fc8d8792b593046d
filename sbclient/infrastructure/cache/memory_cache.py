"""Concrete response cache strategies.

``MemoryCache`` keeps entries in a process-wide ``MemoryStore`` so every
client in the process reuses the same cached responses. ``NoopCache``
never stores anything and is the default for callers who opt out.

Entries are stored and handed out as deep copies, so a caller mutating a
returned response never changes what later readers see.
"""

import copy
import logging
from typing import Any, Dict, Optional

from sbclient.domain.interfaces.cache import CacheProvider
from sbclient.domain.models.common import RequestSignature
from sbclient.domain.models.config import CACHE_TYPE_MEMORY, CacheConfig

logger = logging.getLogger(__name__)


class MemoryStore:
    """Process-lifetime mapping from request signature to response.

    Not thread-safe; meant for a single asyncio event loop.
    """

    def __init__(self):
        self.entries: Dict[RequestSignature, Any] = {}

    def clear(self) -> None:
        self.entries = {}

    def __len__(self) -> int:
        return len(self.entries)


# Shared by every MemoryCache that is not given its own store
SHARED_MEMORY_STORE = MemoryStore()


class MemoryCache(CacheProvider):
    """In-memory cache backed by a (by default shared) MemoryStore."""

    def __init__(self, store: Optional[MemoryStore] = None):
        self.store = store if store is not None else SHARED_MEMORY_STORE

    async def get(self, key: RequestSignature) -> Optional[Any]:
        value = self.store.entries.get(key)
        if value is None:
            return None
        logger.debug(f"Memory cache hit for key: {key}")
        return copy.deepcopy(value)

    async def set(self, key: RequestSignature, value: Any) -> None:
        self.store.entries[key] = copy.deepcopy(value)
        logger.debug(f"Stored item in memory cache: key={key}")

    async def get_all(self) -> Dict[RequestSignature, Any]:
        return copy.deepcopy(self.store.entries)

    async def flush(self) -> None:
        self.store.clear()
        logger.info("Cleared in-memory response cache.")


class NoopCache(CacheProvider):
    """Cache strategy that never stores anything."""

    async def get(self, key: RequestSignature) -> Optional[Any]:
        return None

    async def set(self, key: RequestSignature, value: Any) -> None:
        pass

    async def get_all(self) -> Dict[RequestSignature, Any]:
        return {}

    async def flush(self) -> None:
        pass


def create_cache_provider(config: CacheConfig, store: Optional[MemoryStore] = None) -> CacheProvider:
    """Selects the cache strategy for a client.

    Args:
        config: The client's cache configuration.
        store: Optional store overriding the process-wide one.

    Returns:
        A MemoryCache for type 'memory', otherwise a NoopCache.
    """
    if config.type == CACHE_TYPE_MEMORY:
        return MemoryCache(store=store)
    if config.type:
        logger.warning(f"Unknown cache type {config.type!r}; caching disabled.")
    return NoopCache()
