import logging
from typing import List
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
import pytest

from shopally.ai_agent.product_enhancer import ProductEnhancer
from shopally.ai_agent.query_parser import QueryParser
from shopally.ai_agent.search_agent import SearchAgent
from shopally.main import create_app
from shopally.models.product import Price, Product
from shopally.services.catalog_service import MockCatalogGateway
from shopally.services.compare_service import CompareService
from shopally.services.llm_gateway import MockLLMGateway
from shopally.services.memory_cache import InMemoryCacheStore
from shopally.services.rate_limit_service import RateLimitService

# Configure logger for tests
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_product(product_id: str, rating: float = 4.0, seller_score: int = 80, usd: float = 10.0, **overrides) -> Product:
    """Build a Product with sensible defaults for tests."""
    fields = {
        "id": product_id,
        "title": f"Product {product_id}",
        "image_url": f"https://img.example.com/{product_id}.jpg",
        "price": Price(usd=usd, etb=usd * 56.5),
        "product_rating": rating,
        "seller_score": seller_score,
        "seller_name": "Test Shop",
        "delivery_estimate": "7-15 days",
        "number_sold": 100,
        "deeplink_url": f"https://shop.example.com/{product_id}",
    }
    fields.update(overrides)
    return Product(**fields)


@pytest.fixture
def make_product():
    """Factory fixture for building products."""
    return build_product


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock) -> InMemoryCacheStore:
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def sample_products() -> List[Product]:
    return [
        build_product("A", rating=4.0, seller_score=80),
        build_product("B", rating=5.0, seller_score=100),
        build_product("C", rating=3.0, seller_score=60),
    ]


@pytest.fixture
def http_response():
    """
    Factory for a patched ``aiohttp.ClientSession.get`` return value.

    The returned object works as ``async with session.get(...) as response``.
    """

    def build(status: int = 200, json_data=None, text: str = "", headers=None):
        mock_response = AsyncMock()
        mock_response.status = status
        mock_response.headers = headers or {}
        mock_response.text = AsyncMock(return_value=text)
        if isinstance(json_data, Exception):
            mock_response.json = AsyncMock(side_effect=json_data)
        else:
            mock_response.json = AsyncMock(return_value=json_data)

        mock_async_context_manager = AsyncMock()
        mock_async_context_manager.__aenter__.return_value = mock_response
        return mock_async_context_manager

    return build


@pytest.fixture
def mock_llm_gateway():
    """LLM gateway whose methods are AsyncMocks with happy-path defaults."""
    gateway = MagicMock()
    gateway.parse_intent = AsyncMock(return_value={"keywords": "phone"})
    gateway.enhance_product = AsyncMock(side_effect=lambda product, query, language: product.model_copy(update={"description": "enhanced"}))
    gateway.compare_products = AsyncMock(return_value={"comparison": []})
    return gateway


@pytest.fixture
def test_app(memory_store) -> FastAPI:
    """
    App wired with mock gateways and an in-memory store.

    The lifespan is not run; state is attached directly.
    """
    application = create_app()
    llm_gateway = MockLLMGateway()
    application.state.rate_limiter = RateLimitService(memory_store, limit=5, window_seconds=60)
    application.state.search_agent = SearchAgent(
        query_parser=QueryParser(llm_gateway),
        catalog_gateway=MockCatalogGateway(),
        product_enhancer=ProductEnhancer(llm_gateway),
    )
    application.state.compare_service = CompareService(llm_gateway)
    return application
