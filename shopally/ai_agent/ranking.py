"""Deterministic product scoring and ordering."""

from typing import List

from shopally.models.product import Product

RATING_WEIGHT = 0.6
SELLER_WEIGHT = 0.4

BUDGET_WORDS = ("price", "cost", "budget", "cheap", "expensive", "affordable", "$", "etb", "birr", "ብር")
DELIVERY_WORDS = ("delivery", "shipping", "arrive", "receive", "days", "time", "fast", "quick", "slow")


def score(product: Product) -> float:
    """Blend of normalized rating (0-100) and seller score (0-100)."""
    rating_score = product.product_rating / 5.0 * 100.0
    return RATING_WEIGHT * rating_score + SELLER_WEIGHT * product.seller_score


def rank_products(products: List[Product]) -> List[Product]:
    """
    Order products by descending score.

    Returns a new list; ties keep their input order and the products are not modified.
    """
    return sorted(products, key=score, reverse=True)


def _text_match(text: str, words: List[str], max_score: int) -> int:
    # Short words count against the ratio but never match
    if not words:
        return 0
    text = text.lower()
    matches = sum(1 for word in words if len(word) > 3 and word in text)
    return int(matches / len(words) * max_score)


def calculate_match_percentage(product: Product, query: str) -> int:
    """
    Estimate how well ``product`` matches ``query`` on a 0-100 scale.

    Combines text overlap of the query with the product's title, description and
    review text, its quality signals, and whether the query asks about price or delivery.
    """
    query_lower = query.lower()
    words = query_lower.split()

    total = _text_match(product.title, words, 30)
    total += _text_match(product.description, words, 20)
    total += _text_match(f"{product.customer_highlights} {product.customer_review}", words, 15)

    if product.product_rating >= 4.0:
        total += 10
    if product.seller_score >= 90:
        total += 8
    if product.number_sold > 1000:
        total += 7

    if any(word in query_lower for word in BUDGET_WORDS):
        total += 10
    if any(word in query_lower for word in DELIVERY_WORDS):
        total += 10

    return min(total, 100)
