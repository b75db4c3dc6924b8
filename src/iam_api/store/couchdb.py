"""CouchDB document store over the HTTP API (``httpx``).

Physical document ids are ``"<type>:<id>"``. Listing goes through the
``_design/iam/_view/by_type`` view, which emits ``[type, id]`` keys and
reduces with ``_count`` so one query returns the total.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from iam_api.common.logging import log_context
from iam_api.settings import Settings

from .base import (
    DocumentPage,
    DocumentStore,
    DocumentStoreUnavailableError,
    StoredDocument,
)
from .paging import decode_page_param, page_links, page_window

logger = logging.getLogger(__name__)

DESIGN_DOC_NAME = "iam"
BY_TYPE_VIEW = "by_type"
DESIGN_DOC: dict[str, Any] = {
    "language": "javascript",
    "views": {
        BY_TYPE_VIEW: {
            "map": (
                "function (doc) {"
                " if (doc.type && doc.entity_id) { emit([doc.type, doc.entity_id], null); }"
                " }"
            ),
            "reduce": "_count",
        }
    },
}

# Fields owned by CouchDB or by this gateway; never part of an entity body.
_RESERVED_FIELDS = frozenset({"_id", "_rev", "type", "entity_id"})


def document_key(doc_type: str, doc_id: str) -> str:
    return f"{doc_type}:{doc_id}"


class CouchDocumentStore(DocumentStore):
    """Document store backed by a single CouchDB database."""

    backend = "couchdb"

    def __init__(self, *, client: httpx.Client, database: str) -> None:
        self._client = client
        self._database = database

    @classmethod
    def from_settings(cls, settings: Settings) -> CouchDocumentStore:
        client = httpx.Client(
            base_url=settings.couchdb_url,
            auth=settings.couchdb_auth,
            timeout=settings.couchdb_timeout_seconds,
            headers={"Accept": "application/json"},
        )
        return cls(client=client, database=settings.couchdb_database)

    # ---- HTTP plumbing ----

    def _path(self, *parts: str) -> str:
        return "/" + "/".join(quote(part, safe="") for part in (self._database, *parts))

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning(
                "store.couchdb.timeout",
                extra=log_context(method=method, path=path),
            )
            raise DocumentStoreUnavailableError(f"CouchDB timed out on {method} {path}.") from exc
        except httpx.TransportError as exc:
            logger.warning(
                "store.couchdb.transport_error",
                extra=log_context(method=method, path=path, error=str(exc)),
            )
            raise DocumentStoreUnavailableError(f"CouchDB unreachable on {method} {path}.") from exc

        if response.status_code >= 500:
            logger.error(
                "store.couchdb.server_error",
                extra=log_context(
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    body=response.text[:500],
                ),
            )
            raise DocumentStoreUnavailableError(
                f"CouchDB returned {response.status_code} on {method} {path}."
            )
        return response

    def _refused(self, operation: str, document: StoredDocument, response: httpx.Response) -> bool:
        event = "conflict" if response.status_code == 409 else "rejected"
        logger.info(
            f"store.couchdb.{operation}.{event}",
            extra=log_context(
                entity_type=document.type,
                entity_id=document.id,
                status_code=response.status_code,
            ),
        )
        return False

    # ---- Mutations ----

    def save(self, document: StoredDocument) -> bool:
        payload = _to_payload(document, include_rev=False)
        response = self._request(
            "PUT", self._path(document_key(document.type, document.id)), json=payload
        )
        if response.status_code in (201, 202):
            return True
        return self._refused("save", document, response)

    def update(self, document: StoredDocument) -> bool:
        if not document.rev:
            return False
        payload = _to_payload(document, include_rev=True)
        response = self._request(
            "PUT", self._path(document_key(document.type, document.id)), json=payload
        )
        if response.status_code in (201, 202):
            return True
        return self._refused("update", document, response)

    def remove(self, doc_type: str, doc_id: str, revision: str) -> bool:
        response = self._request(
            "DELETE",
            self._path(document_key(doc_type, doc_id)),
            params={"rev": revision},
        )
        if response.status_code in (200, 202):
            return True
        return self._refused("remove", StoredDocument(type=doc_type, id=doc_id), response)

    # ---- Reads ----

    def find(self, doc_type: str, doc_id: str) -> StoredDocument | None:
        response = self._request("GET", self._path(document_key(doc_type, doc_id)))
        if response.status_code == 404:
            return None
        _expect_success(response, "find")
        data = response.json()
        if data.get("type") != doc_type:
            return None
        return _from_payload(data)

    def find_all(self, doc_type: str, page_size: int, param: str | None = None) -> DocumentPage:
        page_number = decode_page_param(param)
        offset, limit = page_window(page_number, page_size)
        view_path = self._path("_design", DESIGN_DOC_NAME, "_view", BY_TYPE_VIEW)
        key_range = {
            "startkey": json.dumps([doc_type]),
            "endkey": json.dumps([doc_type, {}]),
        }

        count_response = self._request("GET", view_path, params={**key_range, "reduce": "true"})
        _expect_success(count_response, "count")
        rows = count_response.json().get("rows") or []
        total = int(rows[0]["value"]) if rows else 0

        page_response = self._request(
            "GET",
            view_path,
            params={
                **key_range,
                "reduce": "false",
                "include_docs": "true",
                "skip": str(offset),
                "limit": str(limit),
            },
        )
        _expect_success(page_response, "find_all")
        items = [
            _from_payload(row["doc"])
            for row in page_response.json().get("rows") or []
            if row.get("doc")
        ]

        has_next, has_previous, next_param, previous_param = page_links(
            page_number=page_number,
            page_size=page_size,
            returned=len(items),
            total=total,
        )
        return DocumentPage(
            items=items,
            total_results=total,
            page_number=page_number,
            has_next=has_next,
            has_previous=has_previous,
            next_param=next_param,
            previous_param=previous_param,
        )

    # ---- Lifecycle ----

    def ensure_schema(self) -> None:
        """Create the database and install or refresh the design document."""

        response = self._request("PUT", self._path())
        if response.status_code not in (201, 202, 412):
            _expect_success(response, "create_database")

        design_path = self._path("_design", DESIGN_DOC_NAME)
        current = self._request("GET", design_path)
        payload = dict(DESIGN_DOC)
        if current.status_code == 200:
            existing = current.json()
            if existing.get("views") == DESIGN_DOC["views"]:
                logger.info(
                    "store.couchdb.schema_ready",
                    extra=log_context(database=self._database),
                )
                return
            payload["_rev"] = existing["_rev"]
        elif current.status_code != 404:
            _expect_success(current, "read_design_doc")

        written = self._request("PUT", design_path, json=payload)
        _expect_success(written, "write_design_doc")
        logger.info(
            "store.couchdb.design_doc.written",
            extra=log_context(database=self._database, design_doc=DESIGN_DOC_NAME),
        )

    def check_connection(self) -> None:
        response = self._request("GET", self._path())
        if response.status_code != 200:
            raise DocumentStoreUnavailableError(
                f"CouchDB database {self._database!r} returned {response.status_code}."
            )

    def close(self) -> None:
        self._client.close()


def _expect_success(response: httpx.Response, operation: str) -> None:
    if response.is_success:
        return
    logger.error(
        "store.couchdb.unexpected_status",
        extra=log_context(
            operation=operation,
            status_code=response.status_code,
            body=response.text[:500],
        ),
    )
    raise DocumentStoreUnavailableError(
        f"CouchDB answered {operation} with HTTP {response.status_code}."
    )


def _to_payload(document: StoredDocument, *, include_rev: bool) -> dict[str, Any]:
    payload = {key: value for key, value in document.body.items() if key not in _RESERVED_FIELDS}
    payload["_id"] = document_key(document.type, document.id)
    payload["type"] = document.type
    payload["entity_id"] = document.id
    if include_rev and document.rev:
        payload["_rev"] = document.rev
    return payload


def _from_payload(data: dict[str, Any]) -> StoredDocument:
    body = {key: value for key, value in data.items() if key not in _RESERVED_FIELDS}
    return StoredDocument(
        type=str(data["type"]),
        id=str(data["entity_id"]),
        rev=data.get("_rev"),
        body=body,
    )


__all__ = ["DESIGN_DOC", "CouchDocumentStore", "document_key"]
