"""
Service layer for external integrations.
"""

from .catalog_service import AliExpressCatalogGateway, MockCatalogGateway
from .compare_service import CompareService
from .fx_service import CachedFXClient, FXService, PriceConverter
from .llm_gateway import MockLLMGateway, OpenAILLMGateway
from .memory_cache import InMemoryCacheStore
from .openai_service import OpenAIService
from .rate_limit_service import RateLimitDecision, RateLimitService
from .read_through_cache import ReadThroughCache
from .redis_service import RedisService

__all__ = [
    "AliExpressCatalogGateway",
    "MockCatalogGateway",
    "CompareService",
    "FXService",
    "CachedFXClient",
    "PriceConverter",
    "OpenAILLMGateway",
    "MockLLMGateway",
    "InMemoryCacheStore",
    "OpenAIService",
    "RateLimitService",
    "RateLimitDecision",
    "ReadThroughCache",
    "RedisService",
]
