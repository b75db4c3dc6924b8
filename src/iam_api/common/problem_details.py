"""RFC 7807 Problem Details payloads for IAM API errors."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from fastapi import status
from pydantic import Field

from .schema import BaseSchema


@dataclass(frozen=True)
class ErrorDefinition:
    type: str
    title: str
    status: int


def _define(*definitions: ErrorDefinition) -> dict[str, ErrorDefinition]:
    return {definition.type: definition for definition in definitions}


ERROR_DEFINITIONS: dict[str, ErrorDefinition] = _define(
    ErrorDefinition("not_found", "Not found", status.HTTP_404_NOT_FOUND),
    ErrorDefinition("method_not_allowed", "Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED),
    ErrorDefinition("conflict", "Conflict", status.HTTP_409_CONFLICT),
    ErrorDefinition(
        "validation_error", "Validation error", status.HTTP_422_UNPROCESSABLE_CONTENT
    ),
    # internal_error must precede the data_* failures that share its status.
    ErrorDefinition(
        "internal_error", "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR
    ),
    ErrorDefinition(
        "data_saving_failure", "Data saving failure", status.HTTP_500_INTERNAL_SERVER_ERROR
    ),
    ErrorDefinition(
        "data_updating_failure", "Data updating failure", status.HTTP_500_INTERNAL_SERVER_ERROR
    ),
    ErrorDefinition(
        "data_removal_failure", "Data removal failure", status.HTTP_500_INTERNAL_SERVER_ERROR
    ),
    ErrorDefinition(
        "external_service_error", "Document store unavailable", status.HTTP_502_BAD_GATEWAY
    ),
)

_DEFINITION_BY_STATUS: dict[int, ErrorDefinition] = {}
for _definition in ERROR_DEFINITIONS.values():
    _DEFINITION_BY_STATUS.setdefault(_definition.status, _definition)

# Request locations FastAPI puts at the head of a validation ``loc``.
_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


class ProblemDetailsErrorItem(BaseSchema):
    """One entry of the ``errors`` array.

    ``path`` is the dotted field the entry is about; ``location`` is where the
    value arrived (``path``, ``query`` or ``body``).
    """

    code: str | None = None
    message: str
    path: str | None = None
    location: str | None = None
    value: Any = None


class ProblemDetails(BaseSchema):
    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str
    request_id: str | None = Field(default=None, alias="requestId")
    errors: list[ProblemDetailsErrorItem] | None = None


class ApiError(RuntimeError):
    """An error that already knows its Problem Details rendering."""

    def __init__(
        self,
        *,
        error_type: str,
        status_code: int,
        detail: str | None = None,
        title: str | None = None,
        errors: list[ProblemDetailsErrorItem] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(detail or title or error_type)
        self.error_type = error_type
        self.status_code = status_code
        self.detail = detail
        self.title = title
        self.errors = errors
        self.headers = headers


def resolve_error_definition(status_code: int, error_type: str | None = None) -> ErrorDefinition:
    """Pick the definition for ``error_type``, falling back to ``status_code``."""

    if error_type is not None and error_type in ERROR_DEFINITIONS:
        return ERROR_DEFINITIONS[error_type]
    fallback = ErrorDefinition(type="error", title="Error", status=status_code)
    return _DEFINITION_BY_STATUS.get(status_code, fallback)


def format_error_path(loc: Iterable[Any] | None) -> str | None:
    """``("body", "assigned_roles", 2)`` -> ``"assigned_roles[2]"``."""

    path = ""
    for entry in loc or ():
        if entry in _LOCATIONS:
            continue
        if isinstance(entry, int):
            path += f"[{entry}]"
        else:
            path = f"{path}.{entry}" if path else str(entry)
    return path or None


def error_items_from_pydantic(errors: Iterable[dict[str, Any]]) -> list[ProblemDetailsErrorItem]:
    items: list[ProblemDetailsErrorItem] = []
    for entry in errors:
        loc = entry.get("loc") or ()
        if isinstance(loc, str):
            loc = (loc,)
        value = entry.get("input")
        items.append(
            ProblemDetailsErrorItem(
                code=str(entry["type"]) if entry.get("type") else None,
                message=str(entry.get("msg") or "Invalid value"),
                path=format_error_path(loc),
                location=str(loc[0]) if loc and loc[0] in _LOCATIONS else None,
                # Nested inputs can be arbitrarily large; only echo scalars.
                value=value if isinstance(value, (str, int, float, bool)) else None,
            )
        )
    return items


def build_problem_details(
    *,
    status_code: int,
    instance: str,
    request_id: str | None,
    detail: str | None = None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    error_type: str | None = None,
    title: str | None = None,
) -> ProblemDetails:
    definition = resolve_error_definition(status_code, error_type)
    return ProblemDetails(
        type=error_type or definition.type,
        title=title or definition.title,
        status=status_code,
        detail=detail,
        instance=instance,
        request_id=request_id,
        errors=errors,
    )


__all__ = [
    "ERROR_DEFINITIONS",
    "ApiError",
    "ErrorDefinition",
    "ProblemDetails",
    "ProblemDetailsErrorItem",
    "build_problem_details",
    "error_items_from_pydantic",
    "format_error_path",
    "resolve_error_definition",
]
