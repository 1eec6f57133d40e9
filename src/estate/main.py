"""
Estate Listings - Main Application
==================================

Real-estate listing API.

Modules:
- Listings: property listings, search, page metadata and buyer inquiries

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and business rules
- Infrastructure: Database

Importing this module builds the ASGI app but reads no required
configuration and opens no connections. The hosting platform imports it
during its build to enumerate routes; the datastore is reached only when a
``@force_dynamic`` handler runs.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from estate import __version__
from estate.config import get_cors_origins, get_settings, get_site_name, resolve_with_fallback
from estate.core import ApplicationException
from estate.infrastructure.database import close_database, get_connection_factory
from estate.listings.interfaces import listings_router
from estate.shared.api import DynamicAwareRoute, force_dynamic
from estate.shared.api.middleware import install_middleware
from estate.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


def configure_runtime(app: FastAPI) -> str:
    """
    Install JSON logging and record the environment name on the app.

    Reads only ENVIRONMENT and LOG_LEVEL through fallbacks, so it cannot
    fail on a half-configured deployment. Runs from the lifespan, and from
    the serverless entry module where the lifespan is disabled.
    """
    environment = resolve_with_fallback("ENVIRONMENT", "production")
    setup_logging(
        level=resolve_with_fallback("LOG_LEVEL", "INFO"),
        environment=environment
    )
    app.state.environment = environment
    return environment


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging (fallback-safe values only)

    The database is deliberately not touched here; the connection factory
    connects on the first request that needs it.

    SHUTDOWN:
    1. Dispose the cached database connection, if any
    """
    environment = configure_runtime(app)

    logger.info("Starting Estate Listings API", extra={
        "version": __version__,
        "environment": environment
    })

    yield  # Application runs here

    logger.info("Shutting down Estate Listings API")
    await close_database()
    logger.info("Estate Listings API shutdown complete")


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    Only display-only settings with fallbacks are read here.
    """
    app = FastAPI(
        title="Estate Listings API",
        description="""
        ## Real-estate listing API

        **Listings**
        - `POST /listings` - Create a listing
        - `GET /listings` - Search listings
        - `GET /listings/{id}` / `GET /listings/slug/{slug}` - Get a listing
        - `PATCH /listings/{id}` / `DELETE /listings/{id}` - Update or delete
        - `GET /listings/{id}/metadata` - Page metadata (title, canonical URL, Open Graph)

        **Inquiries**
        - `POST /listings/{id}/inquiries` - Contact the seller
        - `GET /listings/{id}/inquiries` - Inquiries received

        Every data-backed route is evaluated per request and answered with
        `Cache-Control: no-store`.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.router.route_class = DynamicAwareRoute

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_middleware(app)

    app.include_router(listings_router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/", root, methods=["GET"], tags=["Root"])

    return app


# === Health Check Endpoint ===

@force_dynamic
async def health_check(
    request: Request,
    deep: bool = Query(False, description="Connect to the datastore if not yet connected")
):
    """
    Health check endpoint for load balancers and orchestrators.

    Without ``deep`` this never opens a connection: it pings the cached one
    if there is one. With ``deep`` it acquires a connection first, so a
    missing DATABASE_URL shows up as ``degraded`` rather than an error.
    """
    factory = get_connection_factory()
    checks = {}

    if deep:
        try:
            await factory.acquire()
        except ApplicationException as e:
            checks["database"] = f"error: {e.message}"

    if "database" not in checks:
        if factory.handle is None:
            checks["database"] = "not_connected"
        elif await factory.health_check():
            checks["database"] = "connected"
        else:
            checks["database"] = "unreachable"

    healthy = checks["database"] in ("connected", "not_connected")
    return {
        "status": "healthy" if healthy else "degraded",
        "version": __version__,
        "environment": getattr(request.app.state, "environment", "unknown"),
        "checks": checks
    }


async def root():
    """Root endpoint with API information."""
    return {
        "service": get_site_name(),
        "version": __version__,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "listings": {
                "prefix": "/listings",
                "endpoints": [
                    "POST /listings - Create listing",
                    "GET /listings - Search listings",
                    "GET /listings/{id} - Get listing",
                    "GET /listings/{id}/metadata - Page metadata",
                    "POST /listings/{id}/inquiries - Send inquiry"
                ]
            }
        }
    }


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "estate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
