"""Test gateway selection, service wiring and the application lifespan."""

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
import pytest

from shopally.ai_agent.search_agent import SearchAgent
from shopally.dependencies import build_services, close_services
from shopally.main import create_app
from shopally.services.catalog_service import AliExpressCatalogGateway, MockCatalogGateway
from shopally.services.compare_service import CompareService
from shopally.services.factory import GatewayFactory, GatewayProvider
from shopally.services.llm_gateway import MockLLMGateway, OpenAILLMGateway
from shopally.services.memory_cache import InMemoryCacheStore
from shopally.services.rate_limit_service import RateLimitService
from shopally.services.redis_service import RedisService


def test_factory_mock_gateways():
    price_converter = MagicMock()

    assert isinstance(GatewayFactory.create_catalog_gateway(price_converter, provider="mock"), MockCatalogGateway)
    assert isinstance(GatewayFactory.create_llm_gateway(provider="MOCK"), MockLLMGateway)


def test_factory_live_gateways():
    price_converter = MagicMock()
    openai_service = MagicMock()

    catalog = GatewayFactory.create_catalog_gateway(price_converter, provider="live")
    llm = GatewayFactory.create_llm_gateway(openai_service, provider="live")

    assert isinstance(catalog, AliExpressCatalogGateway)
    assert catalog.price_converter is price_converter
    assert isinstance(llm, OpenAILLMGateway)
    assert llm.openai_service is openai_service


def test_factory_unknown_provider():
    with pytest.raises(ValueError, match="Unsupported gateway provider"):
        GatewayFactory.create_catalog_gateway(MagicMock(), provider="serpapi")


@pytest.mark.parametrize("use_mock,expected", [(True, GatewayProvider.MOCK), (False, GatewayProvider.LIVE)])
def test_default_provider_from_config(use_mock, expected):
    with patch("shopally.services.factory.gateway_factory.USE_MOCK_GATEWAYS", use_mock):
        assert GatewayFactory.default_provider() is expected


@pytest.mark.asyncio
async def test_build_services_mock():
    services = build_services("mock")

    assert services.provider is GatewayProvider.MOCK
    assert isinstance(services.cache, InMemoryCacheStore)
    assert services.openai_service is None
    assert services.rate_limiter.cache is services.cache
    assert isinstance(services.search_agent.catalog_gateway, MockCatalogGateway)

    result = await services.search_agent.search("phone", "en")
    assert len(result.products) == 5

    await close_services(services)


@pytest.mark.asyncio
async def test_build_services_live_shares_one_cache():
    services = build_services("live")

    assert services.provider is GatewayProvider.LIVE
    assert isinstance(services.cache, RedisService)
    assert services.price_converter.fx_client.cache.store is services.cache
    assert isinstance(services.search_agent.catalog_gateway, AliExpressCatalogGateway)

    services.cache.redis = MagicMock(aclose=AsyncMock())
    services.openai_service.client = MagicMock(close=AsyncMock())
    await close_services(services)
    services.cache.redis.aclose.assert_awaited_once()
    services.openai_service.client.close.assert_awaited_once()


def test_lifespan_attaches_services():
    with patch("shopally.main.build_services", return_value=build_services("mock")):
        with TestClient(create_app()) as client:
            app_state = client.app.state
            assert isinstance(app_state.rate_limiter, RateLimitService)
            assert isinstance(app_state.search_agent, SearchAgent)
            assert isinstance(app_state.compare_service, CompareService)
            assert not hasattr(app_state, "services")

            response = client.get("/api/v1/search", params={"q": "phone"}, headers={"X-Device-ID": "device-1"})
            assert response.status_code == 200
            assert len(response.json()["data"]["products"]) == 5
