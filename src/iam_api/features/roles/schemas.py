"""Pydantic schemas for role payloads."""

from __future__ import annotations

from pydantic import Field, field_validator

from iam_api.common.schema import BaseSchema
from iam_api.features.management.schemas import EntityOut, EntityPage


class RoleIn(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    created_by: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name must not be blank")
        return cleaned


class RoleOut(EntityOut):
    name: str | None = None
    description: str | None = None


class RolePage(EntityPage[RoleOut]):
    """Paginated roles."""


__all__ = ["RoleIn", "RoleOut", "RolePage"]
