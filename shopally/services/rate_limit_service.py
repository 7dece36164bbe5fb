"""Service for per-device fixed-window rate limiting."""

from dataclasses import dataclass

from shopally.services.interfaces import CacheStore
from shopally.utils import CacheStoreError, MissingDeviceIDError, logger
from shopally.utils.config import RATE_LIMIT_LIMIT, RATE_LIMIT_WINDOW_SECONDS


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate-limit check."""

    allowed: bool
    count: int
    retry_after: int = 0


class RateLimitService:
    """
    Fixed-window counter keyed by device ID.

    The expiry is set only by the increment that creates the counter, so the
    window starts at the device's first request. Two concurrent first requests
    may both set the same expiry; that is an accepted approximation.
    """

    def __init__(self, cache: CacheStore, limit: int = RATE_LIMIT_LIMIT, window_seconds: int = RATE_LIMIT_WINDOW_SECONDS):
        """
        Initialize with a cache store.

        Args:
            cache: Store supporting ``incr`` and ``expire``
            limit: Max requests allowed per window
            window_seconds: Window length in seconds
        """
        self.cache = cache
        self.limit = limit
        self.window_seconds = window_seconds

    @staticmethod
    def key_for(device_id: str) -> str:
        return f"rate:{device_id}"

    async def hit(self, device_id: str) -> RateLimitDecision:
        """
        Count one request for ``device_id``.

        Args:
            device_id: Value of the X-Device-ID header

        Returns:
            RateLimitDecision: Whether the request may proceed

        Raises:
            MissingDeviceIDError: If the device ID is blank (the store is not touched)
            CacheStoreError: If the counter cannot be incremented
        """
        if not device_id or not device_id.strip():
            raise MissingDeviceIDError("X-Device-ID header is required")

        key = self.key_for(device_id.strip())
        count = await self.cache.incr(key)

        if count == 1:
            try:
                await self.cache.expire(key, self.window_seconds)
            except CacheStoreError as e:
                logger.error("❌ Failed to set rate-limit window for %s: %s", key, e)

        if count > self.limit:
            logger.warning("⚠️ Rate limit exceeded for device %s (%d/%d)", device_id, count, self.limit)
            return RateLimitDecision(allowed=False, count=count, retry_after=self.window_seconds)

        return RateLimitDecision(allowed=True, count=count)
