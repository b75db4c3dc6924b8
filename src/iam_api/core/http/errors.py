"""Translate management errors into Problem Details responses."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, Request, status
from starlette.responses import Response

from iam_api.common.exceptions import api_error_handler
from iam_api.common.problem_details import (
    ERROR_DEFINITIONS,
    ApiError,
    ProblemDetailsErrorItem,
)
from iam_api.features.management.errors import ManagementError

type HttpExceptionHandler = Callable[[Request, Exception], Response | Awaitable[Response]]


def status_for(exc: ManagementError) -> int:
    definition = ERROR_DEFINITIONS.get(exc.code)
    return definition.status if definition else status.HTTP_500_INTERNAL_SERVER_ERROR


def to_api_error(exc: ManagementError) -> ApiError:
    definition = ERROR_DEFINITIONS.get(exc.code)
    return ApiError(
        error_type=exc.code,
        status_code=status_for(exc),
        detail=exc.message,
        title=definition.title if definition else None,
        errors=[
            ProblemDetailsErrorItem(
                code=detail.code,
                message=detail.message,
                path=detail.field,
                location=str(detail.location) if detail.location else None,
                value=detail.value,
            )
            for detail in exc.details
        ]
        or None,
    )


def _handle_management_error(request: Request, exc: ManagementError) -> Response:
    return api_error_handler(request, to_api_error(exc))


def register_management_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(
        ManagementError,
        cast(HttpExceptionHandler, _handle_management_error),
    )


__all__ = ["register_management_exception_handlers", "status_for", "to_api_error"]
