"""Product catalog gateways: the AliExpress affiliate API and a fixed mock catalog."""

import asyncio
import hashlib
import hmac
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from shopally.models.product import Price, Product
from shopally.services.fx_service import PriceConverter
from shopally.services.normalizers.product_normalizer import ProductNormalizer
from shopally.utils import CatalogAPIException, logger
from shopally.utils.config import (
    ALIEXPRESS_APP_KEY,
    ALIEXPRESS_APP_SECRET,
    ALIEXPRESS_BASE_URL,
    ALIEXPRESS_SIGN_STRATEGY,
    CATALOG_DEFAULT_PAGE_SIZE,
    CATALOG_TIMEOUT_SECONDS,
)

PROVIDER = "aliexpress"
QUERY_METHOD = "aliexpress.affiliate.product.query"

# Search filter name -> AliExpress request parameter
FILTER_PARAMS = {
    "category_ids": "category_ids",
    "min_price": "min_sale_price",
    "max_price": "max_sale_price",
    "delivery_days_max": "delivery_days",
    "target_currency": "target_currency",
    "target_language": "target_language",
    "ship_to_country": "ship_to_country",
    "sort": "sort",
    "page_no": "page_no",
    "page_size": "page_size",
}


def _concatenate(params: Dict[str, str]) -> str:
    return "".join(f"{key}{params[key]}" for key in sorted(params) if params[key] != "")


def sign_hmac_sha256(params: Dict[str, str], app_secret: str) -> str:
    """HMAC-SHA256 keyed by the app secret over the sorted key/value concatenation, uppercase hex."""
    return hmac.new(app_secret.encode("utf-8"), _concatenate(params).encode("utf-8"), hashlib.sha256).hexdigest().upper()


def sign_secret_wrapped_sha256(params: Dict[str, str], app_secret: str) -> str:
    """SHA256 of ``secret + concatenation + secret``, uppercase hex."""
    payload = f"{app_secret}{_concatenate(params)}{app_secret}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest().upper()


SIGNERS: Dict[str, Callable[[Dict[str, str], str], str]] = {
    "hmac": sign_hmac_sha256,
    "concat": sign_secret_wrapped_sha256,
}


def _format_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class AliExpressCatalogGateway:
    """
    Client for the AliExpress affiliate product query API.

    Attributes:
        app_key: Affiliate app key
        app_secret: Affiliate app secret used for request signing
        base_url: Sync endpoint URL
        price_converter: Fills the ETB price of every product
    """

    def __init__(
        self,
        price_converter: PriceConverter,
        app_key: Optional[str] = None,
        app_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        sign_strategy: str = ALIEXPRESS_SIGN_STRATEGY,
        timeout: float = CATALOG_TIMEOUT_SECONDS,
    ):
        self.price_converter = price_converter
        self.app_key = app_key or ALIEXPRESS_APP_KEY
        self.app_secret = app_secret or ALIEXPRESS_APP_SECRET
        self.base_url = base_url or ALIEXPRESS_BASE_URL
        self.timeout = timeout

        strategy = sign_strategy.lower()
        if strategy not in SIGNERS:
            raise ValueError(f"Unsupported AliExpress sign strategy: {sign_strategy}")
        self.sign = SIGNERS[strategy]

        if not self.app_key or not self.app_secret:
            logger.warning("⚠️ No AliExpress app key/secret provided. API calls will fail.")

    def build_params(self, keywords: str, filters: Dict[str, Any], timestamp_ms: Optional[int] = None) -> Dict[str, str]:
        """
        Build the signed query parameters for a product search.

        Filters are mapped to AliExpress parameter names; unknown and empty values are omitted.
        """
        params = {
            "method": QUERY_METHOD,
            "app_key": self.app_key or "",
            "timestamp": str(timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)),
            "sign_method": "sha256",
            "keywords": keywords,
            "page_no": "1",
            "page_size": str(CATALOG_DEFAULT_PAGE_SIZE),
        }

        for name, value in filters.items():
            param = FILTER_PARAMS.get(name)
            if param is None or value is None:
                continue
            formatted = _format_param(value)
            if formatted:
                params[param] = formatted

        params = {key: value for key, value in params.items() if value != ""}
        params["sign"] = self.sign(params, self.app_secret or "")
        return params

    async def fetch_products(self, keywords: str, filters: Dict[str, Any]) -> List[Product]:
        """
        Search the catalog and return products priced in USD and ETB.

        Raises:
            CatalogAPIException: On missing credentials, transport errors, redirects or non-200 responses
            FXRateError: If the ETB price cannot be computed
        """
        logger.info("🔍 Searching AliExpress for: %s (filters=%s)", keywords, filters)

        if not self.app_key or not self.app_secret:
            raise CatalogAPIException("Missing AliExpress app key or secret", PROVIDER, 401)

        params = self.build_params(keywords, filters)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    self.base_url, params=params, allow_redirects=False, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if 300 <= response.status < 400:
                        location = response.headers.get("Location", "")
                        logger.error("❌ AliExpress API redirected (%d) to %s", response.status, location)
                        raise CatalogAPIException(f"API redirected to {location}", PROVIDER, 502)

                    if response.status != 200:
                        error_text = await response.text()
                        logger.error("❌ AliExpress API error (%d): %s", response.status, error_text[:1000])
                        raise CatalogAPIException(f"API returned status {response.status}", PROVIDER, 502)

                    data = await response.json(content_type=None)

        except aiohttp.ClientError as e:
            logger.error("❌ AliExpress API request failed: %s", str(e))
            raise CatalogAPIException(f"API request failed: {e}", PROVIDER, 503) from e

        except asyncio.TimeoutError as e:
            logger.error("❌ AliExpress API timed out after %.1fs", self.timeout)
            raise CatalogAPIException("API request timed out", PROVIDER, 504) from e

        except ValueError as e:
            logger.error("❌ AliExpress API returned invalid JSON: %s", str(e))
            raise CatalogAPIException("Invalid JSON in API response", PROVIDER, 502) from e

        if isinstance(data, dict) and "error_response" in data:
            logger.error("❌ AliExpress API error response: %s", data["error_response"])
            raise CatalogAPIException(str(data["error_response"].get("msg", "error_response")), PROVIDER, 502)

        items = ProductNormalizer.extract_items(data)
        if not items:
            logger.warning("⚠️ No products in AliExpress response for '%s'", keywords)
            return []

        products = [p for p in (ProductNormalizer.normalize_aliexpress_product(item) for item in items) if p is not None]

        rate = await self.price_converter.usd_etb_rate()
        fx_timestamp = datetime.now(timezone.utc)
        for product in products:
            product.price.etb = round(product.price.usd * rate, 2)
            product.price.fx_timestamp = fx_timestamp

        logger.info("✅ Found %d products for '%s'", len(products), keywords)
        return products


MOCK_FX_TIMESTAMP = datetime(2025, 8, 22, 10, 0, tzinfo=timezone.utc)

MOCK_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "MOCK-123",
        "title": "Mock Smartphone - High Quality",
        "ai_match_percentage": 92,
        "price": (4999.00, 45.45),
        "product_rating": 4.6,
        "seller_score": 95,
        "delivery_estimate": "15-30 days",
        "description": "High quality smartphone suitable for everyday use.",
        "customer_highlights": "Good camera, solid battery life",
        "customer_review": "Customers praise its durability and battery.",
        "number_sold": 1200,
    },
    {
        "id": "MOCK-124",
        "title": "Mock Budget Phone",
        "ai_match_percentage": 88,
        "price": (3999.00, 36.36),
        "product_rating": 4.4,
        "seller_score": 90,
        "delivery_estimate": "12-25 days",
        "description": "Affordable smartphone with essential features.",
        "customer_highlights": "Long battery life",
        "customer_review": "Great value for the price.",
        "number_sold": 2450,
    },
    {
        "id": "MOCK-125",
        "title": "Mock Midrange Phone",
        "ai_match_percentage": 90,
        "price": (5499.00, 50.00),
        "product_rating": 4.7,
        "seller_score": 93,
        "delivery_estimate": "10-20 days",
        "description": "Balanced performance and features for most users.",
        "customer_highlights": "Fast charging",
        "customer_review": "Users like the smooth performance.",
        "number_sold": 1780,
    },
    {
        "id": "MOCK-126",
        "title": "Mock Premium Phone",
        "ai_match_percentage": 94,
        "price": (9999.00, 90.90),
        "product_rating": 4.9,
        "seller_score": 98,
        "delivery_estimate": "7-15 days",
        "description": "Premium device with high-end features.",
        "customer_highlights": "High refresh rate display",
        "customer_review": "Top-notch screen and performance.",
        "number_sold": 950,
    },
    {
        "id": "MOCK-127",
        "title": "Mock Accessory Bundle",
        "ai_match_percentage": 80,
        "price": (799.00, 7.27),
        "product_rating": 4.2,
        "seller_score": 85,
        "delivery_estimate": "10-18 days",
        "description": "Budget-friendly accessory kit for phones.",
        "customer_highlights": "Budget friendly",
        "customer_review": "Great for everyday needs.",
        "number_sold": 5200,
    },
]


class MockCatalogGateway:
    """Returns a fixed set of phone products regardless of the query."""

    async def fetch_products(self, keywords: str, filters: Dict[str, Any]) -> List[Product]:
        logger.info("🧪 Mock catalog search for: %s", keywords)
        products = []
        for fixture in MOCK_PRODUCTS:
            fields = dict(fixture)
            etb, usd = fields.pop("price")
            products.append(
                Product(
                    **fields,
                    image_url="https://via.placeholder.com/150",
                    price=Price(etb=etb, usd=usd, fx_timestamp=MOCK_FX_TIMESTAMP),
                    deeplink_url="#",
                )
            )
        return products
