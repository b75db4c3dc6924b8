"""Request middleware: correlation IDs, request logs and CORS."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from iam_api.settings import Settings

from .logging import bind_request_context, clear_request_context, log_context

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("iam_api.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID for the request and log how it finished.

    The caller's ``X-Request-ID`` is reused when present and echoed back on
    the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.correlation_id = request_id
        bind_request_context(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The traceback is logged by the unhandled exception handler.
            logger.error("request.error", extra=self._fields(request, started, None))
            clear_request_context()
            raise

        logger.info(
            "request.complete",
            extra=self._fields(request, started, response.status_code),
        )
        clear_request_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _fields(request: Request, started: float, status_code: int | None) -> dict[str, object]:
        return log_context(
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
        )


def register_middleware(app: FastAPI, settings: Settings) -> None:
    if settings.server_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.server_cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["ETag", REQUEST_ID_HEADER],
        )
    app.add_middleware(RequestContextMiddleware)


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware", "register_middleware"]
