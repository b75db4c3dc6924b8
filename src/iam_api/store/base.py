"""Document store gateway contract shared by the SQL and CouchDB backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class DocumentStoreError(Exception):
    """Raised when a document store cannot complete a request."""


class DocumentStoreUnavailableError(DocumentStoreError):
    """Raised on timeouts, transport failures and backend outages."""


class InvalidPageParamError(DocumentStoreError):
    """Raised when a pagination cursor cannot be decoded."""

    def __init__(self, param: str) -> None:
        super().__init__(f"Invalid page parameter {param!r}.")
        self.param = param


@dataclass(slots=True)
class StoredDocument:
    """A typed document plus the revision token assigned by the store.

    ``body`` holds the entity fields only; ``type``, ``id`` and ``rev`` are
    kept out of it so every backend can lay out its own keys.
    """

    type: str
    id: str
    body: dict[str, Any] = field(default_factory=dict)
    rev: str | None = None


@dataclass(slots=True)
class DocumentPage:
    """One page of documents of a single type, ordered by id."""

    items: list[StoredDocument]
    total_results: int
    page_number: int
    has_next: bool
    has_previous: bool
    next_param: str | None = None
    previous_param: str | None = None


class DocumentStore(ABC):
    """Gateway implemented by document store backends.

    Mutations report success as a boolean. ``False`` means the store refused
    the write (id collision, stale or missing revision); it is never raised.
    Backend outages raise :class:`DocumentStoreUnavailableError`.
    """

    backend: str = "unknown"

    @abstractmethod
    def save(self, document: StoredDocument) -> bool:
        """Insert ``document``; return ``False`` if its id is already taken."""

    @abstractmethod
    def update(self, document: StoredDocument) -> bool:
        """Replace the stored body if ``document.rev`` is still current."""

    @abstractmethod
    def find(self, doc_type: str, doc_id: str) -> StoredDocument | None:
        """Return the current version of a document, or ``None``."""

    @abstractmethod
    def find_all(self, doc_type: str, page_size: int, param: str | None = None) -> DocumentPage:
        """Return the page of ``doc_type`` documents addressed by ``param``."""

    @abstractmethod
    def remove(self, doc_type: str, doc_id: str, revision: str) -> bool:
        """Delete a document if ``revision`` is still current."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create tables, databases or views the store needs."""

    @abstractmethod
    def check_connection(self) -> None:
        """Raise DocumentStoreUnavailableError if the backend is not reachable."""

    def close(self) -> None:
        """Release pooled connections."""


__all__ = [
    "DocumentPage",
    "DocumentStore",
    "DocumentStoreError",
    "DocumentStoreUnavailableError",
    "InvalidPageParamError",
    "StoredDocument",
]
