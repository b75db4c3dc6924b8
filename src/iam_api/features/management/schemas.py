"""Response shapes shared by every entity kind."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import Field

from iam_api.common.schema import BaseSchema


class EntityOut(BaseSchema):
    """Fields every stored entity exposes."""

    id: str
    rev: str = Field(description="Current revision token; send it back as If-Match.")
    type: str
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None


ItemT = TypeVar("ItemT")


class EntityPage(BaseSchema, Generic[ItemT]):
    """One page of entities plus the store's pagination metadata."""

    items: list[ItemT]
    total_results: int
    page_number: int
    has_next: bool
    has_previous: bool
    next_param: str | None = Field(
        default=None,
        description="Pass as `param` to fetch the next page.",
    )
    previous_param: str | None = Field(
        default=None,
        description="Pass as `param` to fetch the previous page.",
    )


__all__ = ["EntityOut", "EntityPage"]
