from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from iam_api.store.base import DocumentStoreUnavailableError, StoredDocument
from iam_api.store.couchdb import DESIGN_DOC, CouchDocumentStore
from iam_api.store.paging import encode_page_param

Handler = Callable[[httpx.Request], httpx.Response]


def _store(handler: Handler) -> tuple[CouchDocumentStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(base_url="http://couch.test", transport=httpx.MockTransport(_record))
    return CouchDocumentStore(client=client, database="iam"), seen


def _couch_doc(doc_type: str, doc_id: str, rev: str, **body: object) -> dict[str, object]:
    return {
        "_id": f"{doc_type}:{doc_id}",
        "_rev": rev,
        "type": doc_type,
        "entity_id": doc_id,
        **body,
    }


def test_save_puts_namespaced_document() -> None:
    store, seen = _store(lambda request: httpx.Response(201, json={"ok": True}))

    saved = store.save(
        StoredDocument(type="user", id="jane@example.com", body={"first_name": "Jane"})
    )

    assert saved is True
    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == "/iam/user:jane@example.com"
    payload = json.loads(request.content)
    assert payload == {
        "_id": "user:jane@example.com",
        "type": "user",
        "entity_id": "jane@example.com",
        "first_name": "Jane",
    }


def test_save_conflict_returns_false() -> None:
    store, _ = _store(lambda request: httpx.Response(409, json={"error": "conflict"}))

    assert store.save(StoredDocument(type="role", id="admin", body={"name": "admin"})) is False


def test_update_sends_revision() -> None:
    store, seen = _store(lambda request: httpx.Response(201, json={"ok": True, "rev": "2-b"}))

    updated = store.update(
        StoredDocument(type="group", id="ops", rev="1-a", body={"name": "ops"})
    )

    assert updated is True
    assert json.loads(seen[0].content)["_rev"] == "1-a"


def test_update_without_revision_is_not_sent() -> None:
    store, seen = _store(lambda request: httpx.Response(201, json={"ok": True}))

    assert store.update(StoredDocument(type="group", id="ops", body={})) is False
    assert seen == []


def test_update_with_stale_revision_returns_false() -> None:
    store, _ = _store(lambda request: httpx.Response(409, json={"error": "conflict"}))

    assert store.update(StoredDocument(type="group", id="ops", rev="1-a", body={})) is False


def test_find_maps_document_and_strips_reserved_fields() -> None:
    doc = _couch_doc("role", "admin", "3-c", name="admin", description="All access")
    store, _ = _store(lambda request: httpx.Response(200, json=doc))

    stored = store.find("role", "admin")

    assert stored == StoredDocument(
        type="role",
        id="admin",
        rev="3-c",
        body={"name": "admin", "description": "All access"},
    )


def test_find_missing_returns_none() -> None:
    store, _ = _store(lambda request: httpx.Response(404, json={"error": "not_found"}))

    assert store.find("user", "ghost@example.com") is None


def test_remove_passes_revision_query() -> None:
    store, seen = _store(lambda request: httpx.Response(200, json={"ok": True}))

    assert store.remove("user", "jane@example.com", "4-d") is True
    assert seen[0].method == "DELETE"
    assert seen[0].url.params["rev"] == "4-d"


def test_remove_with_stale_revision_returns_false() -> None:
    store, _ = _store(lambda request: httpx.Response(409, json={"error": "conflict"}))

    assert store.remove("user", "jane@example.com", "1-old") is False


def test_find_all_uses_view_for_total_and_page() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/iam/_design/iam/_view/by_type"
        assert request.url.params["startkey"] == '["group"]'
        assert request.url.params["endkey"] == '["group", {}]'
        if request.url.params["reduce"] == "true":
            return httpx.Response(200, json={"rows": [{"key": None, "value": 3}]})
        assert request.url.params["include_docs"] == "true"
        assert request.url.params["skip"] == "2"
        assert request.url.params["limit"] == "2"
        return httpx.Response(
            200,
            json={"rows": [{"doc": _couch_doc("group", "gamma", "1-x", name="gamma")}]},
        )

    store, seen = _store(handler)

    page = store.find_all("group", 2, encode_page_param(2))

    assert len(seen) == 2
    assert [doc.id for doc in page.items] == ["gamma"]
    assert page.total_results == 3
    assert page.page_number == 2
    assert page.has_next is False
    assert page.has_previous is True
    assert page.previous_param == encode_page_param(1)


def test_find_all_empty_type() -> None:
    store, _ = _store(lambda request: httpx.Response(200, json={"rows": []}))

    page = store.find_all("role", 10)

    assert page.items == []
    assert page.total_results == 0
    assert page.has_next is False


def test_timeout_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    store, _ = _store(handler)

    with pytest.raises(DocumentStoreUnavailableError):
        store.find("user", "jane@example.com")


def test_transport_error_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store, _ = _store(handler)

    with pytest.raises(DocumentStoreUnavailableError):
        store.save(StoredDocument(type="user", id="jane@example.com", body={}))


def test_server_error_raises_unavailable() -> None:
    store, _ = _store(lambda request: httpx.Response(503, json={"error": "down"}))

    with pytest.raises(DocumentStoreUnavailableError):
        store.remove("user", "jane@example.com", "1-a")


def test_ensure_schema_creates_design_document() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT" and request.url.path == "/iam":
            return httpx.Response(412, json={"error": "file_exists"})
        if request.method == "GET" and request.url.path == "/iam/_design/iam":
            return httpx.Response(404, json={"error": "not_found"})
        if request.method == "PUT" and request.url.path == "/iam/_design/iam":
            return httpx.Response(201, json={"ok": True})
        raise AssertionError(f"unexpected request {request.method} {request.url}")

    store, seen = _store(handler)

    store.ensure_schema()

    assert [(request.method, request.url.path) for request in seen] == [
        ("PUT", "/iam"),
        ("GET", "/iam/_design/iam"),
        ("PUT", "/iam/_design/iam"),
    ]
    assert json.loads(seen[-1].content)["views"] == DESIGN_DOC["views"]


def test_ensure_schema_skips_current_design_document() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(412, json={"error": "file_exists"})
        return httpx.Response(200, json={"_id": "_design/iam", "_rev": "1-z", **DESIGN_DOC})

    store, seen = _store(handler)

    store.ensure_schema()

    assert [request.method for request in seen] == ["PUT", "GET"]


def test_check_connection_reports_missing_database() -> None:
    store, _ = _store(lambda request: httpx.Response(404, json={"error": "not_found"}))

    with pytest.raises(DocumentStoreUnavailableError):
        store.check_connection()
