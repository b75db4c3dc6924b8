"""API routes for the health module."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from iam_api.api.deps import DocumentStoreDep, SettingsDep

from .schemas import HealthCheckResponse
from .service import HealthService

router = APIRouter(tags=["health"])


def get_health_service(settings: SettingsDep, store: DocumentStoreDep) -> HealthService:
    return HealthService(settings=settings, store=store)


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service health status",
    response_model_exclude_none=True,
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Document store unreachable."},
    },
)
def read_health(
    response: Response,
    service: Annotated[HealthService, Depends(get_health_service)],
) -> HealthCheckResponse:
    """Return the current health information for the IAM API."""
    result = service.status()
    if result.status != "ok":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result


__all__ = ["router"]
