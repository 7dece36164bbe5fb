"""Search agent that coordinates the product search pipeline."""

import time

from shopally.ai_agent.product_enhancer import ProductEnhancer
from shopally.ai_agent.query_parser import QueryParser, infer_category
from shopally.ai_agent.ranking import rank_products
from shopally.models.intent import SearchFilters
from shopally.models.product import SearchResult
from shopally.services.interfaces import CatalogGateway
from shopally.utils import logger


class SearchAgent:
    """
    Coordinates the search workflow.

    1. Extract filters from the query (failures fall back to no filters)
    2. Infer a category when none was extracted
    3. Fetch products from the catalog (failures propagate)
    4. Rank by quality score unless the user set price or delivery constraints
    5. Enhance every product concurrently

    Attributes:
        query_parser: Extracts SearchFilters from the query
        catalog_gateway: Product catalog search
        product_enhancer: Concurrent content enhancement
    """

    def __init__(self, query_parser: QueryParser, catalog_gateway: CatalogGateway, product_enhancer: ProductEnhancer):
        """
        Initialize the agent via dependency injection.

        Args:
            query_parser: Query parser instance
            catalog_gateway: Catalog gateway instance
            product_enhancer: Product enhancer instance
        """
        self.query_parser = query_parser
        self.catalog_gateway = catalog_gateway
        self.product_enhancer = product_enhancer

    async def search(self, query: str, language: str = "en") -> SearchResult:
        """
        Run the search pipeline for ``query``.

        Args:
            query: User search query
            language: Response language for enhanced content

        Returns:
            SearchResult: Ordered, enhanced products

        Raises:
            CatalogAPIException: If the catalog cannot be searched
            FXRateError: If catalog prices cannot be converted
        """
        start_time = time.time()
        logger.info("🔍 Starting search for query: '%s' (lang=%s)", query, language)

        try:
            filters = await self.query_parser.parse(query)
        except Exception as e:
            logger.error("❌ Query parser raised, continuing without filters: %s", e)
            filters = SearchFilters()

        if not filters.category and not filters.category_ids:
            category = infer_category(query)
            if category:
                filters = filters.model_copy(update={"category": category})

        pruned = filters.to_filters()
        keywords = filters.keywords or query

        products = await self.catalog_gateway.fetch_products(keywords, pruned)
        logger.info("📋 Catalog returned %d products for '%s'", len(products), keywords)

        if filters.has_constraints():
            logger.info("📌 Keeping catalog order for constrained search: %s", pruned)
        else:
            products = rank_products(products)

        enhanced = await self.product_enhancer.enhance_all(products, query, language)

        elapsed_time = time.time() - start_time
        logger.info("✅ Search completed in %.2f seconds, returning %d products", elapsed_time, len(enhanced))
        return SearchResult(products=[p for p in enhanced if p is not None])
