"""Foreign-exchange rate lookup, caching and USD->ETB price conversion."""

import asyncio
import math
from typing import Optional, Tuple

import aiohttp

from shopally.services.interfaces import CacheStore
from shopally.services.read_through_cache import ReadThroughCache
from shopally.utils import CacheStoreError, FXRateError, logger
from shopally.utils.config import FX_API_KEY, FX_API_URL, FX_CACHE_TTL_SECONDS, FX_TIMEOUT_SECONDS


class FXService:
    """
    HTTP exchange-rate provider.

    Attributes:
        api_url: Rates endpoint accepting ``base`` and ``symbols`` query parameters
        api_key: Optional access key sent as ``access_key``
    """

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None, timeout: float = FX_TIMEOUT_SECONDS):
        self.api_url = api_url or FX_API_URL
        self.api_key = api_key or FX_API_KEY
        self.timeout = timeout

    async def fetch_rate(self, base: str, quote: str) -> float:
        """
        Fetch the current ``base``->``quote`` rate.

        Raises:
            FXRateError: On transport failure, non-200 status or a missing/invalid rate
        """
        pair = f"{base}:{quote}"
        params = {"base": base, "symbols": quote}
        if self.api_key:
            params["access_key"] = self.api_key

        logger.info("💱 Fetching FX rate %s", pair)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self.api_url, params=params, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error("❌ FX API error (%d): %s", response.status, error_text)
                        raise FXRateError(f"FX API returned status {response.status}", pair=pair)
                    data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error("❌ FX API request failed: %s", str(e))
            raise FXRateError(f"FX API request failed: {e}", pair=pair) from e
        except asyncio.TimeoutError as e:
            raise FXRateError("FX API request timed out", pair=pair) from e

        try:
            rate = float(data["rates"][quote])
        except (KeyError, TypeError, ValueError) as e:
            logger.error("❌ FX API response has no usable %s rate: %s", quote, data)
            raise FXRateError("FX API response has no usable rate", pair=pair) from e

        if not math.isfinite(rate) or rate <= 0:
            raise FXRateError(f"FX API returned unusable rate {rate}", pair=pair)
        return rate


class CachedFXClient:
    """Read-through cache of exchange rates under ``fx:<BASE>:<QUOTE>``."""

    def __init__(self, provider: FXService, cache: CacheStore, ttl: int = FX_CACHE_TTL_SECONDS):
        self.provider = provider
        self.cache = ReadThroughCache(cache)
        self.ttl = ttl

    @staticmethod
    def key_for(base: str, quote: str) -> str:
        return f"fx:{base.upper()}:{quote.upper()}"

    async def get_rate(self, base: str, quote: str) -> float:
        """
        Return the cached rate, refreshing from the provider on a miss.

        Raises:
            FXRateError: If the rate cannot be obtained or the cached value is unparsable
        """
        base, quote = base.upper(), quote.upper()
        key = self.key_for(base, quote)

        async def load() -> str:
            return repr(await self.provider.fetch_rate(base, quote))

        try:
            raw = await self.cache.get_or_load(key, load, self.ttl)
        except CacheStoreError as e:
            raise FXRateError(f"FX cache unavailable: {e}", pair=f"{base}:{quote}") from e

        try:
            rate = float(raw)
        except (TypeError, ValueError) as e:
            logger.error("❌ Unparsable cached FX rate under %s: %r", key, raw)
            raise FXRateError(f"Unparsable cached rate {raw!r}", pair=f"{base}:{quote}") from e

        if not math.isfinite(rate) or rate <= 0:
            raise FXRateError(f"Invalid cached rate {rate}", pair=f"{base}:{quote}")
        return rate


class PriceConverter:
    """Converts catalog USD prices to ETB."""

    def __init__(self, fx_client: CachedFXClient):
        self.fx_client = fx_client

    async def usd_etb_rate(self) -> float:
        return await self.fx_client.get_rate("USD", "ETB")

    async def usd_to_etb(self, usd: float) -> Tuple[float, float]:
        """
        Convert a USD amount.

        Returns:
            Tuple[float, float]: ``(etb, rate)`` where ``etb = usd * rate``

        Raises:
            FXRateError: If no rate is available; a zero price is never returned in its place
        """
        rate = await self.usd_etb_rate()
        return usd * rate, rate
