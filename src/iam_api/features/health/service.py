"""Service layer for the health module."""

from __future__ import annotations

import logging

from iam_api.common.logging import log_context
from iam_api.common.time import utc_now
from iam_api.settings import Settings
from iam_api.store.base import DocumentStore, DocumentStoreError

from .schemas import HealthCheckResponse, HealthComponentStatus

logger = logging.getLogger(__name__)


class HealthService:
    """Compute health responses for readiness/liveness checks."""

    def __init__(self, *, settings: Settings, store: DocumentStore) -> None:
        self._settings = settings
        self._store = store

    def status(self) -> HealthCheckResponse:
        """Return the API status plus document store connectivity."""

        components = [
            HealthComponentStatus(
                name="api",
                status="available",
                detail=f"v{self._settings.app_version}",
            )
        ]
        overall = "ok"
        try:
            self._store.check_connection()
        except DocumentStoreError as exc:
            overall = "degraded"
            components.append(
                HealthComponentStatus(
                    name=f"store:{self._store.backend}",
                    status="unavailable",
                    detail=str(exc),
                )
            )
            logger.warning(
                "health.status.store_unavailable",
                extra=log_context(backend=self._store.backend, error=str(exc)),
            )
        else:
            components.append(
                HealthComponentStatus(name=f"store:{self._store.backend}", status="available")
            )

        return HealthCheckResponse(status=overall, timestamp=utc_now(), components=components)


__all__ = ["HealthService"]
