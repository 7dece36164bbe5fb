"""Redis-backed cache store used for rate-limit counters and FX rates."""

from typing import Optional, Tuple

from redis.asyncio import Redis
from redis.exceptions import RedisError

from shopally.utils import CacheStoreError, logger
from shopally.utils.config import REDIS_DB, REDIS_HOST, REDIS_KEY_PREFIX, REDIS_PASSWORD, REDIS_PORT


class RedisService:
    """
    Cache store over an async Redis client.

    Every operation applies the configured key prefix. A miss is reported as
    ``(None, False)``; only transport or command failures raise ``CacheStoreError``.

    Attributes:
        redis: Async Redis client
        prefix: Namespace prepended to every key
    """

    def __init__(self, redis_client: Optional[Redis] = None, prefix: str = REDIS_KEY_PREFIX):
        """
        Initialize the store.

        Args:
            redis_client: Optional pre-built client (tests inject a mock)
            prefix: Optional key namespace
        """
        self.redis = redis_client or Redis(host=REDIS_HOST, port=REDIS_PORT, db=REDIS_DB, password=REDIS_PASSWORD, decode_responses=True)
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Tuple[Optional[str], bool]:
        """
        Read a value.

        Returns:
            Tuple[Optional[str], bool]: The stored value and whether the key existed
        """
        try:
            value = await self.redis.get(self._key(key))
        except RedisError as e:
            logger.error("❌ Redis GET failed for %s: %s", key, str(e))
            raise CacheStoreError("Redis GET failed", key=key) from e
        if value is None:
            return None, False
        return value, True

    async def set(self, key: str, value: str, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds (no expiry when ttl <= 0)."""
        try:
            if ttl > 0:
                await self.redis.set(self._key(key), value, ex=ttl)
            else:
                await self.redis.set(self._key(key), value)
        except RedisError as e:
            logger.error("❌ Redis SET failed for %s: %s", key, str(e))
            raise CacheStoreError("Redis SET failed", key=key) from e

    async def incr(self, key: str) -> int:
        """Atomically increment the counter at ``key`` and return the new value."""
        try:
            return int(await self.redis.incr(self._key(key)))
        except RedisError as e:
            logger.error("❌ Redis INCR failed for %s: %s", key, str(e))
            raise CacheStoreError("Redis INCR failed", key=key) from e

    async def expire(self, key: str, ttl: int) -> bool:
        """Set the time-to-live of ``key`` in seconds."""
        try:
            return bool(await self.redis.expire(self._key(key), ttl))
        except RedisError as e:
            logger.error("❌ Redis EXPIRE failed for %s: %s", key, str(e))
            raise CacheStoreError("Redis EXPIRE failed", key=key) from e

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self.redis.aclose()
