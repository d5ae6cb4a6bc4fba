"""
Aura API.

FastAPI-based REST interface over the device binding policy and the
trust evaluator.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aura import __version__
from aura.api.routes import deps, router
from aura.api.schemas import (
    DeviceRecordSchema,
    HealthCheck,
    RestrictionResponse,
    TrustBadgeSchema,
    TrustCalculateRequest,
    TrustEvaluation,
    TrustEventRequest,
    TrustScoreSchema,
)
from aura.device.mapping import create_mapping

if TYPE_CHECKING:
    from aura.config import AuraConfig
    from aura.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the configured store on shutdown."""
    logger.info("Starting Aura API")
    yield
    logger.info("Shutting down Aura API")
    if deps.store is not None:
        await deps.store.close()


# ============================================================================
# FastAPI Application
# ============================================================================


def create_app(
    title: str = "Aura Trust API",
    debug: bool = False,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        title: API title
        debug: Enable debug mode
        cors_origins: Allowed CORS origins

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=title,
        description="Device binding and trust scoring for Aura accounts",
        version=__version__,
        debug=debug,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    origins = cors_origins or ["http://localhost:8081"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if debug else None,
            },
        )

    return app


def configure_services(config: AuraConfig, store: KeyValueStore) -> None:
    """
    Configure application services.

    Args:
        config: Loaded configuration
        store: Store holding the user -> device mapping
    """
    deps.config = config
    deps.store = store
    deps.mapping = create_mapping(
        store, config.storage.mapping_mode, config.storage.mapping_key
    )
    logger.info(
        "API services configured (%s store, %s mapping)",
        config.storage.backend, config.storage.mapping_mode,
    )


__all__ = [
    "DeviceRecordSchema",
    "HealthCheck",
    "RestrictionResponse",
    "TrustBadgeSchema",
    "TrustCalculateRequest",
    "TrustEvaluation",
    "TrustEventRequest",
    "TrustScoreSchema",
    "configure_services",
    "create_app",
    "deps",
]
