"""FastAPI lifespan helpers for the IAM application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio.to_thread
from fastapi import FastAPI
from fastapi.routing import Lifespan

from iam_api.common.logging import log_context
from iam_api.common.time import utc_now
from iam_api.settings import Settings
from iam_api.store import DocumentStore, build_document_store

logger = logging.getLogger(__name__)


def create_application_lifespan(
    *,
    settings: Settings,
    store: DocumentStore | None = None,
) -> Lifespan[FastAPI]:
    """Return the FastAPI lifespan handler used by the app factory.

    The document store is built from ``settings`` unless one is passed in,
    has its schema ensured on startup and is closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.started_at = utc_now()
        document_store = store or build_document_store(settings)

        logger.info(
            "iam_api.startup",
            extra=log_context(
                version=settings.app_version,
                backend=document_store.backend,
                logging_level=settings.log_level,
            ),
        )
        await anyio.to_thread.run_sync(document_store.ensure_schema)
        app.state.document_store = document_store

        try:
            yield
        finally:
            app.state.document_store = None
            await anyio.to_thread.run_sync(document_store.close)
            logger.info(
                "iam_api.shutdown",
                extra=log_context(backend=document_store.backend),
            )

    return lifespan


__all__ = ["create_application_lifespan"]
