"""Schemas for health responses."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from iam_api.common.schema import BaseSchema


class HealthComponentStatus(BaseSchema):
    name: str
    status: Literal["available", "unavailable"]
    detail: str | None = None


class HealthCheckResponse(BaseSchema):
    """Overall service health and the status of each dependency."""

    status: Literal["ok", "degraded"]
    timestamp: datetime
    components: list[HealthComponentStatus] = Field(default_factory=list)


__all__ = ["HealthCheckResponse", "HealthComponentStatus"]
