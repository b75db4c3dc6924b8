"""Document store gateways."""

from __future__ import annotations

from iam_api.settings import Settings

from .base import (
    DocumentPage,
    DocumentStore,
    DocumentStoreError,
    DocumentStoreUnavailableError,
    InvalidPageParamError,
    StoredDocument,
)
from .couchdb import CouchDocumentStore
from .sql import SqlDocumentStore


def build_document_store(settings: Settings) -> DocumentStore:
    """Return the gateway selected by ``settings.document_store``."""

    if settings.document_store == "couchdb":
        return CouchDocumentStore.from_settings(settings)
    return SqlDocumentStore.from_settings(settings)


__all__ = [
    "CouchDocumentStore",
    "DocumentPage",
    "DocumentStore",
    "DocumentStoreError",
    "DocumentStoreUnavailableError",
    "InvalidPageParamError",
    "SqlDocumentStore",
    "StoredDocument",
    "build_document_store",
]
