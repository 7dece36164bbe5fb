"""Natural language query parser producing structured search filters."""

from typing import Optional

from pydantic import ValidationError

from shopally.models.intent import SearchFilters
from shopally.services.interfaces import LLMGateway
from shopally.utils import logger

# Checked in order; the first matching keyword group wins.
CATEGORY_KEYWORDS = (
    ("smartphone", ("phone", "smartphone", "iphone", "galaxy")),
    ("laptop", ("laptop", "notebook", "macbook")),
    ("headphone", ("earbud", "headphone", "airpods")),
    ("watch", ("watch", "smartwatch")),
)


def infer_category(query: str) -> Optional[str]:
    """
    Guess a product category from keywords in the query.

    Example:
        "cheap galaxy under 200" -> "smartphone"
    """
    lowered = query.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


class QueryParser:
    """
    Turns a raw query into SearchFilters using the language-model gateway.

    Parsing never fails the search: provider errors and non-object results
    resolve to empty filters, and a single invalid value drops only that filter.
    """

    def __init__(self, llm_gateway: LLMGateway):
        self.llm_gateway = llm_gateway

    async def parse(self, query: str) -> SearchFilters:
        """
        Extract filters from ``query``.

        Args:
            query: Raw search query from the user

        Returns:
            SearchFilters: Extracted filters, empty when extraction fails
        """
        logger.info("🔍 Extracting search filters from: %s", query)

        try:
            intent = await self.llm_gateway.parse_intent(query)
        except Exception as e:
            logger.error("❌ Intent extraction failed, continuing without filters: %s", e)
            return SearchFilters()

        if not isinstance(intent, dict):
            logger.error("❌ Intent provider returned %s instead of an object", type(intent).__name__)
            return SearchFilters()

        try:
            filters = SearchFilters.model_validate(intent)
        except ValidationError as e:
            logger.error("❌ Intent failed validation, continuing without filters: %s", e)
            return SearchFilters()

        logger.info("✅ Extracted filters: %s", filters.to_filters())
        return filters
