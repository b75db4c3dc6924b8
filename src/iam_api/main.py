"""IAM FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .api.v1.router import create_api_router
from .app.lifecycles import create_application_lifespan
from .common.exceptions import register_exception_handlers
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .core.http.errors import register_management_exception_handlers
from .features.health.router import router as health_router
from .settings import Settings, get_settings
from .store.base import DocumentStore

API_PREFIX = "/api"
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
) -> FastAPI:
    """Create and configure the IAM FastAPI application."""
    # Settings + logging first so everything else uses the configured root logger.
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url if settings.api_docs_enabled else None,
        redoc_url=None,
        openapi_url=settings.openapi_url if settings.api_docs_enabled else None,
        debug=False,
        lifespan=create_application_lifespan(settings=settings, store=store),
    )
    app.state.settings = settings
    app.state.document_store = None

    register_exception_handlers(app)
    register_management_exception_handlers(app)

    register_middleware(app, settings)
    app.include_router(health_router)
    app.include_router(create_api_router(), prefix=API_PREFIX)
    if settings.api_docs_enabled:
        logger.info(
            "api.docs.enabled",
            extra={"swagger_url": settings.docs_url, "openapi_url": settings.openapi_url},
        )

    return app


__all__ = [
    "API_PREFIX",
    "create_app",
]
