"""API routes for product search and comparison."""

import asyncio
import re
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from shopally.ai_agent.search_agent import SearchAgent
from shopally.api.responses import error_response, ok_response
from shopally.dependencies import get_compare_service, get_search_agent
from shopally.models.product import CompareRequest
from shopally.services.compare_service import MAX_COMPARE_PRODUCTS, MIN_COMPARE_PRODUCTS, CompareService
from shopally.utils import CatalogAPIException, FXRateError, LLMServiceError, logger
from shopally.utils.config import DEFAULT_RESPONSE_LANGUAGE, SEARCH_TIMEOUT_SECONDS

router = APIRouter()

MAX_QUERY_LENGTH = 500


def response_language(accept_language: Optional[str]) -> str:
    """Reduce an Accept-Language header to a two-letter code ("am-ET,en;q=0.8" -> "am")."""
    if not accept_language or not accept_language.strip():
        return DEFAULT_RESPONSE_LANGUAGE
    return accept_language.strip()[:2].lower()


@router.get("/health")
async def health_check():
    """
    Health check endpoint to verify API status.

    Returns:
        dict: Status message indicating API is running
    """
    return {"status": "ok"}


@router.get("/search")
async def search(request: Request, q: str = "", search_agent: SearchAgent = Depends(get_search_agent)):
    """
    Search the catalog for products matching a natural-language query.

    Args:
        request: FastAPI request object (used for Accept-Language)
        q: Search query string

    Returns:
        JSONResponse: ``{"data": {"products": [...]}, "error": null}``
    """
    query = re.sub(r"[<>]", "", q.strip())
    if not query:
        return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", "query parameter 'q' is required")

    if len(query) > MAX_QUERY_LENGTH:
        return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", f"Query too long (max {MAX_QUERY_LENGTH} characters)")

    language = response_language(request.headers.get("Accept-Language"))

    try:
        result = await asyncio.wait_for(search_agent.search(query, language), timeout=SEARCH_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error("⏱️ Search for '%s' exceeded %.1fs", query, SEARCH_TIMEOUT_SECONDS)
        return error_response(status.HTTP_504_GATEWAY_TIMEOUT, "UPSTREAM_TIMEOUT", "Search took too long, please try again later.")
    except (CatalogAPIException, FXRateError) as e:
        logger.error("❌ Upstream error during search for '%s': %s", query, e)
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "UPSTREAM_UNAVAILABLE", "Service temporarily unavailable, please try again later.")
    except Exception as e:
        logger.exception("💥 Unexpected internal error during search for '%s': %s", query, e)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "An internal server error occurred processing your request.")

    return ok_response(result.to_json())


@router.post("/compare")
async def compare(request: Request, compare_service: CompareService = Depends(get_compare_service)):
    """
    Compare 2-4 products.

    Requires an Accept-Language header and a JSON body ``{"products": [...]}``.

    Returns:
        JSONResponse: ``{"data": {"comparison": [...]}, "error": null}``
    """
    accept_language = request.headers.get("Accept-Language", "")
    if not accept_language.strip():
        return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", "Accept-Language header is required")
    language = response_language(accept_language)

    try:
        body = await request.json()
    except ValueError:
        return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", "Request body must be valid JSON")

    try:
        compare_request = CompareRequest.model_validate(body)
    except ValidationError as e:
        logger.warning("Invalid compare request: %s", e)
        return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", "Request body must contain a products list")

    count = len(compare_request.products)
    if not MIN_COMPARE_PRODUCTS <= count <= MAX_COMPARE_PRODUCTS:
        return error_response(
            status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", f"Between {MIN_COMPARE_PRODUCTS} and {MAX_COMPARE_PRODUCTS} products are required"
        )

    try:
        result = await compare_service.compare(compare_request.products, language)
    except LLMServiceError as e:
        logger.error("❌ Comparison failed: %s", e)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "Failed to compare products")
    except Exception as e:
        logger.exception("💥 Unexpected internal error during comparison: %s", e)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "Failed to compare products")

    return ok_response(result)
