"""Pydantic schemas for group payloads."""

from __future__ import annotations

from pydantic import Field, field_validator

from iam_api.common.schema import BaseSchema
from iam_api.features.management.schemas import EntityOut, EntityPage


class GroupIn(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    assigned_roles: set[str] = Field(default_factory=set)
    created_by: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name must not be blank")
        return cleaned


class GroupOut(EntityOut):
    name: str | None = None
    assigned_roles: list[str] = Field(default_factory=list)


class GroupPage(EntityPage[GroupOut]):
    """Paginated groups."""


__all__ = ["GroupIn", "GroupOut", "GroupPage"]
