"""Factory for creating catalog and language-model gateways."""

from enum import Enum
from typing import Optional

from shopally.services.catalog_service import AliExpressCatalogGateway, MockCatalogGateway
from shopally.services.fx_service import PriceConverter
from shopally.services.interfaces import CatalogGateway, LLMGateway
from shopally.services.llm_gateway import MockLLMGateway, OpenAILLMGateway
from shopally.services.openai_service import OpenAIService
from shopally.utils import logger
from shopally.utils.config import USE_MOCK_GATEWAYS


class GatewayProvider(str, Enum):
    """Supported gateway backends."""

    MOCK = "mock"  # Fixed fixtures, no network
    LIVE = "live"  # AliExpress affiliate API + OpenAI


class GatewayFactory:
    """
    Builds gateways for the configured provider.

    The choice is made once at startup; nothing switches provider per request.
    """

    @staticmethod
    def default_provider() -> GatewayProvider:
        return GatewayProvider.MOCK if USE_MOCK_GATEWAYS else GatewayProvider.LIVE

    @classmethod
    def _resolve(cls, provider: Optional[str]) -> GatewayProvider:
        if provider is None:
            return cls.default_provider()
        try:
            return GatewayProvider(provider.lower())
        except ValueError:
            logger.error("❌ Unsupported gateway provider: %s", provider)
            raise ValueError(f"Unsupported gateway provider: {provider}") from None

    @classmethod
    def create_catalog_gateway(cls, price_converter: PriceConverter, provider: Optional[str] = None) -> CatalogGateway:
        """
        Create the product catalog gateway.

        Args:
            price_converter: Used by the live gateway to price products in ETB
            provider: "mock" or "live"; defaults to USE_MOCK_GATEWAYS

        Raises:
            ValueError: If provider is not supported
        """
        if cls._resolve(provider) is GatewayProvider.MOCK:
            return MockCatalogGateway()
        return AliExpressCatalogGateway(price_converter=price_converter)

    @classmethod
    def create_llm_gateway(cls, openai_service: Optional[OpenAIService] = None, provider: Optional[str] = None) -> LLMGateway:
        """
        Create the language-model gateway.

        Raises:
            ValueError: If provider is not supported
        """
        if cls._resolve(provider) is GatewayProvider.MOCK:
            return MockLLMGateway()
        return OpenAILLMGateway(openai_service or OpenAIService())
