"""Capabilities the search core depends on, each with a live and a mock implementation."""

from typing import Any, Dict, List, Optional, Protocol, Tuple

from shopally.models.product import Product


class CacheStore(Protocol):
    """Key/value store shared by RedisService and InMemoryCacheStore. A miss is never an error."""

    async def get(self, key: str) -> Tuple[Optional[str], bool]: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, ttl: int) -> bool: ...


class CatalogGateway(Protocol):
    """Anything that can search the product catalog."""

    async def fetch_products(self, keywords: str, filters: Dict[str, Any]) -> List[Product]: ...


class LLMGateway(Protocol):
    """What the search and compare flows need from a language model."""

    async def parse_intent(self, query: str) -> Dict[str, Any]: ...

    async def enhance_product(self, product: Product, query: str, language: str) -> Product: ...

    async def compare_products(self, products: List[Product], language: str) -> Dict[str, Any]: ...
