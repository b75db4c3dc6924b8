"""Entity lifecycle: existence checks, revision propagation and CRUD for every kind."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, cast

from pydantic import BaseModel

from iam_api.common.logging import log_context
from iam_api.common.time import utc_timestamp
from iam_api.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from iam_api.store.base import (
    DocumentStore,
    DocumentStoreError,
    InvalidPageParamError,
    StoredDocument,
)

from .documents import GroupDocument, UserDocument
from .errors import (
    DataConflictError,
    DataRemovalFailureError,
    DataSavingFailureError,
    DataUpdatingFailureError,
    DetailLocation,
    ExternalServiceFailureError,
    ResourceNotFoundError,
    ValidationFailureError,
)
from .kinds import GROUP, EntityKind
from .resolver import RoleResolver
from .schemas import EntityOut, EntityPage

logger = logging.getLogger(__name__)


class EntityLifecycleManager:
    """Run the save/update/remove protocol against a document store.

    Every mutation reads the current document first. Updates and removals
    send the stored revision (or the caller's expected one) back to the
    store; a ``False`` answer from the store is final and is never retried.
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._resolver = RoleResolver(lookup_group=self._lookup_group)

    # ---- Reads ----

    def find_one(self, kind: EntityKind, entity_id: str) -> EntityOut:
        stored = self._require(kind, entity_id)
        return kind.to_response(stored)

    def find_all(
        self,
        kind: EntityKind,
        *,
        page_size: int | None = None,
        param: str | None = None,
    ) -> EntityPage[Any]:
        size = min(page_size or self._default_page_size, self._max_page_size)
        with self._store_call(kind, "find_all"):
            try:
                page = self._store.find_all(kind.type, size, param)
            except InvalidPageParamError as exc:
                raise ValidationFailureError("Invalid page parameter.").add_detail(
                    "The page parameter is not a cursor issued by this service.",
                    exc.param,
                    code=kind.detail_code("invalid_page_param"),
                    field="param",
                    location=DetailLocation.QUERY,
                ) from exc

        logger.debug(
            kind.event("list.success"),
            extra=log_context(
                entity_type=kind.type,
                page_number=page.page_number,
                count=len(page.items),
                total=page.total_results,
            ),
        )
        return kind.to_page(page)

    # ---- Mutations ----

    def save(self, kind: EntityKind, entity_id: str, payload: BaseModel) -> EntityOut:
        """Create a new entity with id ``entity_id``."""

        logger.debug(
            kind.event("save.start"),
            extra=log_context(entity_type=kind.type, entity_id=entity_id),
        )
        if self._find(kind, entity_id) is not None:
            raise DataConflictError(f"{kind.label} already exists.").add_detail(
                f"A {kind.type} with this id already exists.",
                entity_id,
                code=kind.detail_code("already_exists"),
                field=kind.id_field,
                location=DetailLocation.BODY,
            )

        document = kind.to_document(payload)
        document.id = entity_id
        document.type = kind.type
        now = utc_timestamp()
        document.created_at = now
        document.updated_at = now
        if kind.resolves_roles and isinstance(document, UserDocument):
            document.assigned_roles = self._resolver.resolve_for_create(document)

        with self._store_call(kind, "save", entity_id):
            saved = self._store.save(kind.to_stored(document))
        if not saved:
            logger.warning(
                kind.event("save.refused"),
                extra=log_context(entity_type=kind.type, entity_id=entity_id),
            )
            raise DataSavingFailureError(f"{kind.label} could not be saved.").add_detail(
                "The document store refused the write.",
                entity_id,
                code=kind.detail_code("save_failed"),
                field="id",
            )

        stored = self._require(kind, entity_id)
        logger.info(
            kind.event("save.success"),
            extra=log_context(entity_type=kind.type, entity_id=entity_id, rev=stored.rev),
        )
        return kind.to_response(stored)

    def update(
        self,
        kind: EntityKind,
        entity_id: str,
        payload: BaseModel,
        *,
        expected_revision: str | None = None,
    ) -> EntityOut:
        """Replace an existing entity.

        The write carries ``expected_revision`` when given, otherwise the
        revision just read from the store.
        """

        logger.debug(
            kind.event("update.start"),
            extra=log_context(entity_type=kind.type, entity_id=entity_id),
        )
        existing_stored = self._require(kind, entity_id)
        existing = kind.to_document(existing_stored)

        submitted_id = getattr(payload, kind.id_field, None)
        if submitted_id is not None and str(submitted_id) != entity_id:
            raise ValidationFailureError(f"{kind.label} id cannot be changed.").add_detail(
                f"The {kind.id_field} must match the {kind.type} being updated.",
                str(submitted_id),
                code=kind.detail_code("id_mismatch"),
                field=kind.id_field,
                location=DetailLocation.BODY,
            )

        document = kind.to_document(payload)
        if (
            kind.resolves_roles
            and isinstance(document, UserDocument)
            and isinstance(existing, UserDocument)
        ):
            document.assigned_roles = self._resolver.resolve_for_update(document, existing)

        document.id = entity_id
        document.type = kind.type
        document.created_at = existing.created_at
        document.created_by = existing.created_by
        document.updated_at = utc_timestamp()
        revision = expected_revision or existing_stored.rev

        with self._store_call(kind, "update", entity_id):
            updated = self._store.update(kind.to_stored(document, rev=revision))
        if not updated:
            logger.warning(
                kind.event("update.refused"),
                extra=log_context(entity_type=kind.type, entity_id=entity_id, rev=revision),
            )
            raise DataUpdatingFailureError(f"{kind.label} could not be updated.").add_detail(
                "The revision is missing or no longer current.",
                revision,
                code=kind.detail_code("update_failed"),
                field="rev",
            )

        stored = self._require(kind, entity_id)
        logger.info(
            kind.event("update.success"),
            extra=log_context(
                entity_type=kind.type,
                entity_id=entity_id,
                previous_rev=existing_stored.rev,
                rev=stored.rev,
            ),
        )
        return kind.to_response(stored)

    def remove(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        expected_revision: str | None = None,
    ) -> None:
        existing = self._require(kind, entity_id)
        revision = expected_revision or existing.rev or ""

        with self._store_call(kind, "remove", entity_id):
            removed = self._store.remove(kind.type, entity_id, revision)
        if not removed:
            logger.warning(
                kind.event("remove.refused"),
                extra=log_context(entity_type=kind.type, entity_id=entity_id, rev=revision),
            )
            raise DataRemovalFailureError(f"{kind.label} could not be removed.").add_detail(
                "The revision is no longer current.",
                revision,
                code=kind.detail_code("remove_failed"),
                field="rev",
            )

        logger.info(
            kind.event("remove.success"),
            extra=log_context(entity_type=kind.type, entity_id=entity_id, rev=revision),
        )

    # ---- Helpers ----

    def _find(self, kind: EntityKind, entity_id: str) -> StoredDocument | None:
        with self._store_call(kind, "find", entity_id):
            return self._store.find(kind.type, entity_id)

    def _require(self, kind: EntityKind, entity_id: str) -> StoredDocument:
        stored = self._find(kind, entity_id)
        if stored is None:
            raise ResourceNotFoundError(f"{kind.label} not found.").add_detail(
                f"No {kind.type} with this id.",
                entity_id,
                code=kind.detail_code("not_found"),
                field="id",
                location=DetailLocation.PATH,
            )
        return stored

    def _lookup_group(self, group_id: str) -> GroupDocument | None:
        stored = self._find(GROUP, group_id)
        if stored is None:
            return None
        return cast(GroupDocument, GROUP.to_document(stored))

    @contextmanager
    def _store_call(
        self,
        kind: EntityKind,
        operation: str,
        entity_id: str | None = None,
    ) -> Iterator[None]:
        try:
            yield
        except DocumentStoreError as exc:
            logger.error(
                kind.event(f"{operation}.store_unavailable"),
                extra=log_context(
                    entity_type=kind.type,
                    entity_id=entity_id,
                    backend=self._store.backend,
                    error=str(exc),
                ),
            )
            raise ExternalServiceFailureError().add_detail(
                str(exc),
                self._store.backend,
                code="store.unavailable",
            ) from exc


__all__ = ["EntityLifecycleManager"]
