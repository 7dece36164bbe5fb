"""Shared application dependencies."""

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import FastAPI, Request

from shopally.ai_agent.product_enhancer import ProductEnhancer
from shopally.ai_agent.query_parser import QueryParser
from shopally.ai_agent.search_agent import SearchAgent
from shopally.services.compare_service import CompareService
from shopally.services.factory import GatewayFactory, GatewayProvider
from shopally.services.fx_service import CachedFXClient, FXService, PriceConverter
from shopally.services.memory_cache import InMemoryCacheStore
from shopally.services.openai_service import OpenAIService
from shopally.services.rate_limit_service import RateLimitService
from shopally.services.redis_service import RedisService
from shopally.utils import logger


@dataclass
class ServiceContainer:
    """Everything the routes and middleware need, built once per process."""

    cache: Union[RedisService, InMemoryCacheStore]
    rate_limiter: RateLimitService
    price_converter: PriceConverter
    search_agent: SearchAgent
    compare_service: CompareService
    provider: GatewayProvider
    openai_service: Optional[OpenAIService] = None


def build_services(provider: Optional[str] = None) -> ServiceContainer:
    """
    Wire the service graph by constructor injection.

    The mock provider uses fixture gateways and an in-process cache store so the
    API runs without Redis, OpenAI or AliExpress credentials.
    """
    resolved = GatewayProvider(provider) if provider else GatewayFactory.default_provider()
    logger.info("🔧 Building services with %s gateways", resolved.value)

    if resolved is GatewayProvider.MOCK:
        cache = InMemoryCacheStore()
        openai_service = None
    else:
        cache = RedisService()
        openai_service = OpenAIService()

    price_converter = PriceConverter(CachedFXClient(FXService(), cache))
    catalog_gateway = GatewayFactory.create_catalog_gateway(price_converter, provider=resolved.value)
    llm_gateway = GatewayFactory.create_llm_gateway(openai_service, provider=resolved.value)

    search_agent = SearchAgent(
        query_parser=QueryParser(llm_gateway),
        catalog_gateway=catalog_gateway,
        product_enhancer=ProductEnhancer(llm_gateway),
    )

    return ServiceContainer(
        cache=cache,
        rate_limiter=RateLimitService(cache),
        price_converter=price_converter,
        search_agent=search_agent,
        compare_service=CompareService(llm_gateway),
        provider=resolved,
        openai_service=openai_service,
    )


def attach_services(application: FastAPI, services: ServiceContainer) -> None:
    application.state.rate_limiter = services.rate_limiter
    application.state.search_agent = services.search_agent
    application.state.compare_service = services.compare_service


async def close_services(services: ServiceContainer) -> None:
    """Release network resources held by the services."""
    await services.cache.close()
    if services.openai_service is not None:
        await services.openai_service.close()


def get_search_agent(request: Request) -> SearchAgent:
    """Dependency function to get the process-wide SearchAgent."""
    return request.app.state.search_agent


def get_compare_service(request: Request) -> CompareService:
    """Dependency function to get the process-wide CompareService."""
    return request.app.state.compare_service


def get_rate_limiter(request: Request) -> RateLimitService:
    return request.app.state.rate_limiter
