"""In-process cache store with the same contract as RedisService."""

import time
from typing import Callable, Dict, Optional, Tuple


class InMemoryCacheStore:
    """
    Dictionary-backed cache store with absolute expiries.

    Used by the mock wiring and by tests. The clock is injectable so window and
    TTL behaviour can be exercised without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._values: Dict[str, str] = {}
        self._expiry: Dict[str, float] = {}

    def _evict_if_expired(self, key: str) -> None:
        expires_at = self._expiry.get(key)
        if expires_at is not None and self._clock() >= expires_at:
            self._values.pop(key, None)
            self._expiry.pop(key, None)

    async def get(self, key: str) -> Tuple[Optional[str], bool]:
        self._evict_if_expired(key)
        if key not in self._values:
            return None, False
        return self._values[key], True

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._values[key] = value
        if ttl > 0:
            self._expiry[key] = self._clock() + ttl
        else:
            self._expiry.pop(key, None)

    async def incr(self, key: str) -> int:
        """Increment like Redis INCR: a missing key starts at 0 and an existing TTL is kept."""
        self._evict_if_expired(key)
        count = int(self._values.get(key, "0")) + 1
        self._values[key] = str(count)
        return count

    async def expire(self, key: str, ttl: int) -> bool:
        self._evict_if_expired(key)
        if key not in self._values:
            return False
        self._expiry[key] = self._clock() + ttl
        return True

    async def close(self) -> None:
        self._values.clear()
        self._expiry.clear()
