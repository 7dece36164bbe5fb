"""Generic read-through cache over a cache store."""

from typing import Awaitable, Callable

from shopally.services.interfaces import CacheStore
from shopally.utils import logger


class ReadThroughCache:
    """
    Return cached values, loading and storing them on a miss.

    Concurrent misses for the same key each invoke the loader; there is no
    single-flight deduplication.
    """

    def __init__(self, store: CacheStore):
        self.store = store

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[str]], ttl: int) -> str:
        """
        Get ``key`` from the store or compute it with ``loader``.

        Args:
            key: Cache key
            loader: Coroutine factory producing the value on a miss
            ttl: Time-to-live in seconds for a freshly loaded value

        Returns:
            str: Cached or freshly loaded value
        """
        value, hit = await self.store.get(key)
        if hit:
            logger.debug("✅ Cache hit for %s", key)
            return value

        logger.debug("🔍 Cache miss for %s, loading", key)
        value = await loader()
        await self.store.set(key, value, ttl)
        return value
