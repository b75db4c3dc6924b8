"""Pydantic schemas for user payloads."""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from iam_api.common.schema import BaseSchema
from iam_api.features.management.schemas import EntityOut, EntityPage


class UserIn(BaseSchema):
    """Body accepted by user create and update.

    On create the user id is the submitted ``email``. Updates replace every
    field except ``assigned_roles``, which only ever grows.
    """

    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=2048)
    email: EmailStr
    activated: bool = False
    signed_count: str | None = None
    assigned_groups: set[str] = Field(
        default_factory=set,
        description="Group ids; every group must exist.",
    )
    assigned_roles: set[str] = Field(
        default_factory=set,
        description="Role ids assigned directly to the user.",
    )
    created_by: str | None = None

    @field_validator("first_name", "last_name", "avatar_url")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class UserOut(EntityOut):
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    email: str | None = None
    activated: bool = False
    signed_count: str | None = None
    assigned_groups: list[str] = Field(default_factory=list)
    assigned_roles: list[str] = Field(default_factory=list)


class UserPage(EntityPage[UserOut]):
    """Paginated users."""


__all__ = ["UserIn", "UserOut", "UserPage"]
