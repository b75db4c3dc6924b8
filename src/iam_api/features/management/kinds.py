"""Entity kinds: the per-type parameters of the shared lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from iam_api.features.groups.schemas import GroupOut, GroupPage
from iam_api.features.roles.schemas import RoleOut, RolePage
from iam_api.features.users.schemas import UserOut, UserPage
from iam_api.store.base import DocumentPage, StoredDocument

from .documents import EntityDocument, GroupDocument, RoleDocument, UserDocument
from .schemas import EntityOut, EntityPage


@dataclass(frozen=True, slots=True)
class EntityKind:
    """Everything the lifecycle manager needs to know about one entity type.

    ``id_field`` names the payload field that becomes the id on create.
    ``resolves_roles`` switches on group role inheritance.
    """

    type: str
    label: str
    collection: str
    id_field: str
    document_model: type[EntityDocument]
    response_model: type[EntityOut]
    page_model: type[EntityPage[Any]]
    resolves_roles: bool = False

    def detail_code(self, suffix: str) -> str:
        return f"{self.type}.{suffix}"

    def event(self, name: str) -> str:
        return f"{self.collection}.{name}"

    def to_document(self, payload: BaseModel | StoredDocument) -> EntityDocument:
        """Build this kind's document model from a request body or a stored document."""

        if isinstance(payload, StoredDocument):
            return self.document_model.model_validate(
                {**payload.body, "id": payload.id, "rev": payload.rev, "type": payload.type}
            )
        return self.document_model.model_validate(payload.model_dump())

    def to_stored(self, document: EntityDocument, *, rev: str | None = None) -> StoredDocument:
        if document.id is None:
            raise ValueError(f"{self.label} document has no id.")
        return StoredDocument(type=self.type, id=document.id, rev=rev, body=document.body())

    def to_response(self, stored: StoredDocument) -> EntityOut:
        return self.response_model.model_validate(
            {**stored.body, "id": stored.id, "rev": stored.rev, "type": stored.type}
        )

    def to_page(self, page: DocumentPage) -> EntityPage[Any]:
        return self.page_model(
            items=[self.to_response(item) for item in page.items],
            total_results=page.total_results,
            page_number=page.page_number,
            has_next=page.has_next,
            has_previous=page.has_previous,
            next_param=page.next_param,
            previous_param=page.previous_param,
        )


USER = EntityKind(
    type=UserDocument.document_type,
    label="User",
    collection="users",
    id_field="email",
    document_model=UserDocument,
    response_model=UserOut,
    page_model=UserPage,
    resolves_roles=True,
)

GROUP = EntityKind(
    type=GroupDocument.document_type,
    label="Group",
    collection="groups",
    id_field="name",
    document_model=GroupDocument,
    response_model=GroupOut,
    page_model=GroupPage,
)

ROLE = EntityKind(
    type=RoleDocument.document_type,
    label="Role",
    collection="roles",
    id_field="name",
    document_model=RoleDocument,
    response_model=RoleOut,
    page_model=RolePage,
)

KINDS: dict[str, EntityKind] = {kind.type: kind for kind in (USER, GROUP, ROLE)}


__all__ = ["GROUP", "KINDS", "ROLE", "USER", "EntityKind"]
