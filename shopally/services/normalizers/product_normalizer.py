"""Normalizers for transforming raw catalog API data into Product models."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from shopally.models.product import Price, Product
from shopally.utils import logger

RESPONSE_ENVELOPE = "aliexpress_affiliate_product_query_response"


class ProductNormalizer:
    """
    Normalizes raw AliExpress affiliate products into consistent Product objects.

    Prices are left in USD here; the catalog gateway fills the ETB amount.
    """

    @staticmethod
    def extract_items(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Pull the raw product list out of either response shape.

        The sync endpoint nests products as
        ``aliexpress_affiliate_product_query_response.resp_result.result.products.product``;
        the legacy shape is ``resp_result.result.products``.
        """
        if not isinstance(data, dict):
            return []

        envelope = data.get(RESPONSE_ENVELOPE)
        if isinstance(envelope, dict):
            products = ((envelope.get("resp_result") or {}).get("result") or {}).get("products") or {}
            items = products.get("product") if isinstance(products, dict) else products
            if isinstance(items, list) and items:
                return items

        legacy = ((data.get("resp_result") or {}).get("result") or {}).get("products")
        if isinstance(legacy, dict):
            legacy = legacy.get("product")
        return legacy if isinstance(legacy, list) else []

    @staticmethod
    def normalize_aliexpress_product(item: Dict[str, Any], fx_timestamp: Optional[datetime] = None) -> Optional[Product]:
        """
        Normalize a single AliExpress product.

        Args:
            item: Raw product data
            fx_timestamp: Time to stamp on the price

        Returns:
            Product: Normalized product, or None if it has no identifier or invalid values
        """
        product_id = str(item.get("product_id") or "").strip()
        if not product_id:
            logger.warning("⚠️ Skipping catalog product with no product_id")
            return None

        usd = ProductNormalizer._parse_float(item.get("sale_price"))
        if usd == 0:
            usd = ProductNormalizer._parse_float(item.get("app_sale_price"))

        try:
            return Product(
                id=product_id,
                title=str(item.get("product_title") or "").strip(),
                image_url=str(item.get("product_main_image_url") or "").strip(),
                price=Price(usd=usd, etb=0.0, fx_timestamp=fx_timestamp or datetime.now(timezone.utc)),
                product_rating=ProductNormalizer._parse_rating(item.get("evaluate_rate")),
                seller_name=str(item.get("shop_name") or "").strip(),
                number_sold=int(ProductNormalizer._parse_float(item.get("lastest_volume"))),
                delivery_estimate=str(item.get("ship_to_days") or "").strip(),
                deeplink_url=str(item.get("promotion_link") or item.get("product_detail_url") or "").strip(),
                tax_rate=ProductNormalizer._parse_float(item.get("tax_rate")),
                discount=ProductNormalizer._parse_percent(item.get("discount")),
            )
        except ValidationError as e:
            logger.warning("⚠️ Skipping invalid catalog product %s: %s", product_id, e)
            return None

    @staticmethod
    def _parse_float(value: Any) -> float:
        """Parse a number that may carry thousands separators; 0.0 when absent or invalid."""
        if value is None:
            return 0.0
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        text = str(value).strip().replace(",", "")
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return 0.0

    @staticmethod
    def _parse_percent(value: Any) -> float:
        if isinstance(value, str):
            value = value.strip().rstrip("%")
        return ProductNormalizer._parse_float(value)

    @staticmethod
    def _parse_rating(value: Any) -> float:
        """Convert a positive-feedback percentage ("92.1%") to a 0-5 rating."""
        percent = min(max(ProductNormalizer._parse_percent(value), 0.0), 100.0)
        return round(percent / 20.0, 2)
