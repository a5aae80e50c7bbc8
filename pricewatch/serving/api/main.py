"""
FastAPI Application Factory

Creates and configures the catalog API application.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import structlog

from pricewatch.config import Settings, get_settings
from pricewatch.config.logging import configure_logging
from pricewatch.serving.api.deps import AppState
from pricewatch.serving.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from pricewatch.serving.api.routes import (
    etl_router,
    health_router,
    manual_router,
    search_router,
)

logger = structlog.get_logger(__name__)


def create_api_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings override (cached settings if omitted)

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings=settings)
        logger.info("Starting catalog API", environment=settings.app_env)
        yield
        logger.info("Shutting down catalog API")

    app = FastAPI(
        title="Laptop Price Catalog API",
        description="Search and forecasting over merged marketplace price snapshots",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.app_state = AppState.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(search_router, prefix="/api/v1", tags=["Search"])
    app.include_router(etl_router, prefix="/api/v1", tags=["ETL"])
    app.include_router(manual_router, prefix="/api/v1", tags=["Manual"])

    return app
