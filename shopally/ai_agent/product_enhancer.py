"""Concurrent per-product content enhancement."""

import asyncio
import time
from typing import List, Optional

from shopally.models.product import Product
from shopally.services.interfaces import LLMGateway
from shopally.utils import logger


class ProductEnhancer:
    """
    Enhances every product in a list concurrently.

    One task is started per product before any is awaited. Each task writes only
    its own slot of the result list, so no lock is needed. A failing task leaves
    the original product in its slot and never affects its siblings.

    Attributes:
        llm_gateway: Gateway providing ``enhance_product``
    """

    def __init__(self, llm_gateway: LLMGateway):
        self.llm_gateway = llm_gateway

    async def enhance_all(self, products: List[Optional[Product]], query: str, language: str) -> List[Optional[Product]]:
        """
        Enhance ``products`` for ``query`` in ``language``.

        Args:
            products: Ranked products; ``None`` entries are passed through
            query: Original user query
            language: Response language code ("en", "am")

        Returns:
            List[Optional[Product]]: Same length and order as ``products``
        """
        if not products:
            return []

        start_time = time.time()
        results: List[Optional[Product]] = list(products)

        async def enhance_slot(index: int, product: Optional[Product]) -> None:
            if product is None:
                return
            try:
                enhanced = await self.llm_gateway.enhance_product(product, query, language)
                if enhanced is None:
                    return
                results[index] = enhanced.with_identity_of(product)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("❌ Enhancement failed for product %s, keeping original: %s", product.id, e)

        tasks = [asyncio.create_task(enhance_slot(i, p)) for i, p in enumerate(products)]
        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            # Join every child before propagating
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info("✨ Enhanced %d products in %.2f seconds", len(products), time.time() - start_time)
        return results
