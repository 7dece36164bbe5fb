"""Custom FastAPI Middleware Definitions."""

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from shopally.api.responses import error_response
from shopally.dependencies import get_rate_limiter
from shopally.utils import CacheStoreError, MissingDeviceIDError, logger

DEVICE_ID_HEADER = "X-Device-ID"

# Paths counted against the per-device request budget
RATE_LIMITED_PATHS = {
    "/api/v1/search",
    "/api/v1/compare",
}


class DeviceRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window rate limiting keyed by the X-Device-ID header.

    Only paths in RATE_LIMITED_PATHS are counted. The limiter is read from
    ``request.app.state.rate_limiter`` so tests and the lifespan can swap it.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_path = request.url.path.rstrip("/") or "/"

        if request_path not in RATE_LIMITED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        rate_limiter = get_rate_limiter(request)
        device_id = request.headers.get(DEVICE_ID_HEADER, "")

        try:
            decision = await rate_limiter.hit(device_id)
        except MissingDeviceIDError:
            logger.warning("Missing %s header for %s", DEVICE_ID_HEADER, request_path)
            return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", f"{DEVICE_ID_HEADER} header is required")
        except CacheStoreError as e:
            logger.error("❌ Rate limiter store failure for %s: %s", request_path, e)
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "Rate limiter unavailable")

        if not decision.allowed:
            return error_response(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "RATE_LIMIT_EXCEEDED",
                "Too many requests. Please try again later.",
                headers={"Retry-After": str(decision.retry_after)},
            )

        return await call_next(request)
