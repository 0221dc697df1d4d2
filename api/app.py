"""
FastAPI application factory and module-level app instance.

This module provides:
- create_app(): Factory function for creating FastAPI instances
- app: Module-level instance for uvicorn (uvicorn api.app:app)
"""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Config

from .deps import get_settings
from .models import HealthResponse, ServiceInfo
from .routes import api_router

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def create_app() -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Returns:
        FastAPI: Configured application with CORS, routers, and health endpoint.
    """
    app = FastAPI(
        title="apidocs API",
        version=API_VERSION,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    cfg = get_settings()

    # Log application path for debugging path mismatches
    logger.info(f"Application file: {cfg.APP_CONFIG_PATH}")

    # Add CORS middleware only if origins are configured
    origins = cfg.API_CORS_ORIGINS or []
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET"],
            allow_headers=["*"],
            allow_credentials=True,
        )

    # Include versioned API router
    app.include_router(api_router, prefix="/api/v1")

    # Lightweight health endpoint for observability
    @app.get("/healthz", tags=["infra"], response_model=HealthResponse)
    def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok")

    @app.get("/api/v1/info", tags=["infra"], response_model=ServiceInfo)
    def info(cfg: Config = Depends(get_settings)) -> ServiceInfo:
        """Service metadata, including which application file is documented."""
        return ServiceInfo(version=API_VERSION, app_config_path=cfg.APP_CONFIG_PATH)

    return app


# For `uvicorn api.app:app --reload`
app = create_app()
