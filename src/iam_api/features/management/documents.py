"""Stored shapes of users, groups and roles.

``id``, ``rev`` and ``type`` travel next to the body in
:class:`~iam_api.store.base.StoredDocument`; everything else is the body.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_serializer

from iam_api.common.schema import BaseSchema

ENVELOPE_FIELDS: frozenset[str] = frozenset({"id", "rev", "type"})


class EntityDocument(BaseSchema):
    id: str | None = None
    rev: str | None = None
    type: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None

    document_type: ClassVar[str] = ""

    def body(self) -> dict[str, Any]:
        """Return the JSON-ready fields persisted as the document body."""

        return self.model_dump(mode="json", exclude=set(ENVELOPE_FIELDS))


class UserDocument(EntityDocument):
    document_type: ClassVar[str] = "user"

    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    email: str | None = None
    activated: bool = False
    signed_count: str | None = None
    assigned_groups: set[str] = Field(default_factory=set)
    assigned_roles: set[str] = Field(default_factory=set)

    @field_serializer("assigned_groups", "assigned_roles")
    def _sorted_ids(self, value: set[str]) -> list[str]:
        return sorted(value)


class GroupDocument(EntityDocument):
    document_type: ClassVar[str] = "group"

    name: str | None = None
    assigned_roles: set[str] = Field(default_factory=set)

    @field_serializer("assigned_roles")
    def _sorted_ids(self, value: set[str]) -> list[str]:
        return sorted(value)


class RoleDocument(EntityDocument):
    document_type: ClassVar[str] = "role"

    name: str | None = None
    description: str | None = None


__all__ = [
    "ENVELOPE_FIELDS",
    "EntityDocument",
    "GroupDocument",
    "RoleDocument",
    "UserDocument",
]
