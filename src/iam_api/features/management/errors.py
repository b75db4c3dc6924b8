"""Error hierarchy raised by the entity lifecycle and role resolution code.

Errors carry a stable ``code`` plus zero or more :class:`ErrorDetail`
entries. ``add_detail`` returns the error so callers can chain it straight
into ``raise``::

    raise ResourceNotFoundError("User not found.").add_detail(
        "No user with this id.",
        user_id,
        code="user.not_found",
        field="id",
        location=DetailLocation.PATH,
    )

Only the HTTP boundary (``iam_api.core.http.errors``) turns these into
status codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar, Self


class DetailLocation(StrEnum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"


@dataclass(frozen=True, slots=True)
class ErrorDetail:
    code: str
    message: str
    value: Any = None
    field: str | None = None
    location: DetailLocation | None = None


class ManagementError(Exception):
    """Base class for failures of management operations."""

    code: ClassVar[str] = "internal_error"
    default_message: ClassVar[str] = "The operation failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details: list[ErrorDetail] = []

    def add_detail(
        self,
        message: str,
        value: Any = None,
        *,
        code: str,
        field: str | None = None,
        location: DetailLocation | None = None,
    ) -> Self:
        self.details.append(
            ErrorDetail(
                code=code,
                message=message,
                value=value,
                field=field,
                location=location,
            )
        )
        return self


class ResourceNotFoundError(ManagementError):
    code = "not_found"
    default_message = "Resource not found."


class DataConflictError(ManagementError):
    code = "conflict"
    default_message = "Resource already exists."


class DataSavingFailureError(ManagementError):
    code = "data_saving_failure"
    default_message = "The document store refused to save the resource."


class DataUpdatingFailureError(ManagementError):
    code = "data_updating_failure"
    default_message = "The document store refused to update the resource."


class DataRemovalFailureError(ManagementError):
    code = "data_removal_failure"
    default_message = "The document store refused to remove the resource."


class ExternalServiceFailureError(ManagementError):
    code = "external_service_error"
    default_message = "The document store is unavailable."


class ValidationFailureError(ManagementError):
    code = "validation_error"
    default_message = "Invalid request."


__all__ = [
    "DataConflictError",
    "DataRemovalFailureError",
    "DataSavingFailureError",
    "DataUpdatingFailureError",
    "DetailLocation",
    "ErrorDetail",
    "ExternalServiceFailureError",
    "ManagementError",
    "ResourceNotFoundError",
    "ValidationFailureError",
]
