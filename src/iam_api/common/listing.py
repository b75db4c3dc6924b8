"""Query parameters shared by the list endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Query


@dataclass(frozen=True, slots=True)
class ListQueryParams:
    rows_per_page: int | None
    param: str | None


def list_query_params(
    rows_per_page: Annotated[
        int | None,
        Query(
            alias="rowsPerPage",
            ge=1,
            description=(
                "Page size. Defaults to IAM_DEFAULT_PAGE_SIZE, capped at IAM_MAX_PAGE_SIZE."
            ),
        ),
    ] = None,
    param: Annotated[
        str | None,
        Query(
            max_length=512,
            description="Opaque cursor from a previous page's next_param/previous_param.",
        ),
    ] = None,
) -> ListQueryParams:
    return ListQueryParams(rows_per_page=rows_per_page, param=param)


__all__ = ["ListQueryParams", "list_query_params"]
