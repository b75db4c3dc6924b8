"""FastAPI exception handlers that answer with ``application/problem+json``."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from iam_api.common.logging import current_request_id, log_context
from iam_api.common.problem_details import (
    ApiError,
    ProblemDetailsErrorItem,
    build_problem_details,
    error_items_from_pydantic,
)

logger = logging.getLogger("iam_api.errors")

PROBLEM_MEDIA_TYPE = "application/problem+json"
_OPAQUE_DETAIL = "Internal server error"


def problem_response(
    *,
    request: Request,
    status_code: int,
    detail: str | None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    error_type: str | None = None,
    title: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    problem = build_problem_details(
        status_code=status_code,
        instance=request.url.path,
        request_id=getattr(request.state, "correlation_id", None) or current_request_id(),
        detail=detail,
        errors=errors,
        error_type=error_type,
        title=title,
    )
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(mode="json", by_alias=True, exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


def _log_server_error(event: str, request: Request, status_code: int, **extra: object) -> None:
    if status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        return
    logger.error(
        event,
        extra=log_context(
            path=request.url.path,
            method=request.method,
            status_code=status_code,
            **extra,
        ),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback and answer with an opaque 500."""

    logger.exception(
        "unhandled_exception",
        extra=log_context(
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        ),
    )
    return problem_response(
        request=request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=_OPAQUE_DETAIL,
    )


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    _log_server_error("http_exception", request, exc.status_code, detail=exc.detail)
    detail = exc.detail if isinstance(exc.detail, str) else None
    if exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        detail = _OPAQUE_DETAIL
    return problem_response(
        request=request,
        status_code=exc.status_code,
        detail=detail,
        headers=getattr(exc, "headers", None),
    )


def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return problem_response(
        request=request,
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        detail="Invalid request",
        errors=error_items_from_pydantic(exc.errors()),
    )


def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    _log_server_error("api_error", request, exc.status_code, error_type=exc.error_type)
    return problem_response(
        request=request,
        status_code=exc.status_code,
        detail=exc.detail,
        errors=exc.errors,
        error_type=exc.error_type,
        title=exc.title,
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "api_error_handler",
    "http_exception_handler",
    "problem_response",
    "register_exception_handlers",
    "request_validation_exception_handler",
    "unhandled_exception_handler",
]
