"""Main module for the ShopAlly search API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopally.api import routes
from shopally.dependencies import attach_services, build_services, close_services
from shopally.middleware import DeviceRateLimitMiddleware
from shopally.services.factory import GatewayProvider
from shopally.utils import FXRateError, logger


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Lifespan manager for the application.
    Builds the service graph on startup and releases connections on shutdown.
    """
    logger.info("Application startup...")
    services = build_services()
    attach_services(application, services)

    # Warm the USD->ETB rate so the first live search does not pay for it
    if services.provider is GatewayProvider.LIVE:
        try:
            rate = await services.price_converter.usd_etb_rate()
            logger.info("💱 USD->ETB rate warmed: %s", rate)
        except FXRateError as e:
            logger.error("❌ Failed to warm USD->ETB rate: %s", e)

    logger.info("Services initialized and attached to app.state.")

    yield

    logger.info("Application shutdown...")
    await close_services(services)


def create_app() -> FastAPI:
    """Create the FastAPI application with middleware and routers."""
    application = FastAPI(
        title="ShopAlly Search API",
        description="Shopping assistant search: intent parsing, catalog search, ranking and AI-enhanced product content.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Per-device rate limiting, wrapped by CORS so throttled responses keep CORS headers
    application.add_middleware(DeviceRateLimitMiddleware)

    # Configure CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # WARNING: Allow all domains for dev; restrict in production!
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(routes.router, prefix="/api/v1", tags=["search"])
    return application


app = create_app()
