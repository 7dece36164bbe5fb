"""Product comparison use case."""

from typing import Any, Dict, List

from shopally.models.product import Product
from shopally.services.interfaces import LLMGateway
from shopally.utils import logger

MIN_COMPARE_PRODUCTS = 2
MAX_COMPARE_PRODUCTS = 4


class CompareService:
    """Delegates product comparison to the language-model gateway."""

    def __init__(self, llm_gateway: LLMGateway):
        self.llm_gateway = llm_gateway

    async def compare(self, products: List[Product], language: str) -> Dict[str, Any]:
        """
        Compare 2-4 products.

        Raises:
            ValueError: If the product count is out of range
            LLMServiceError: If the comparison cannot be produced
        """
        if not MIN_COMPARE_PRODUCTS <= len(products) <= MAX_COMPARE_PRODUCTS:
            raise ValueError(f"Between {MIN_COMPARE_PRODUCTS} and {MAX_COMPARE_PRODUCTS} products are required, got {len(products)}")

        logger.info("⚖️ Comparing %d products (lang=%s)", len(products), language)
        return await self.llm_gateway.compare_products(products, language)
