"""
AI Agent module for product search.
"""

from .product_enhancer import ProductEnhancer
from .query_parser import QueryParser, infer_category
from .ranking import calculate_match_percentage, rank_products, score
from .search_agent import SearchAgent

__all__ = ["QueryParser", "ProductEnhancer", "SearchAgent", "infer_category", "rank_products", "score", "calculate_match_percentage"]
