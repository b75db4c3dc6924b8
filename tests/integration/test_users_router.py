"""HTTP tests for /api/v1/users."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

USERS = "/api/v1/users"


async def _create_group(client: AsyncClient, name: str, roles: list[str]) -> None:
    response = await client.post("/api/v1/group", json={"name": name, "assigned_roles": roles})
    assert response.status_code == 201, response.text


async def test_create_and_read_user(async_client: AsyncClient) -> None:
    response = await async_client.post(
        USERS,
        json={"email": "Jane@Example.com", "first_name": "Jane", "last_name": "Doe"},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["id"] == "jane@example.com"
    assert body["type"] == "user"
    assert body["activated"] is False
    assert response.headers["ETag"] == f'"{body["rev"]}"'
    assert response.headers["X-Request-ID"]

    read = await async_client.get(f"{USERS}/jane@example.com")
    assert read.status_code == 200
    assert read.json() == body


async def test_request_id_is_echoed(async_client: AsyncClient) -> None:
    response = await async_client.get(f"{USERS}/nobody@example.com", headers={"X-Request-ID": "r-1"})

    assert response.status_code == 404
    assert response.headers["X-Request-ID"] == "r-1"
    assert response.json()["requestId"] == "r-1"


async def test_missing_user_is_problem_details(async_client: AsyncClient) -> None:
    response = await async_client.get(f"{USERS}/nobody@example.com")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    problem = response.json()
    assert problem["type"] == "not_found"
    assert problem["instance"] == f"{USERS}/nobody@example.com"
    assert problem["errors"][0]["code"] == "user.not_found"
    assert problem["errors"][0]["location"] == "path"


async def test_duplicate_user_conflicts(async_client: AsyncClient) -> None:
    payload = {"email": "jane@example.com"}
    assert (await async_client.post(USERS, json=payload)).status_code == 201

    response = await async_client.post(USERS, json=payload)

    assert response.status_code == 409
    problem = response.json()
    assert problem["type"] == "conflict"
    assert problem["errors"][0]["code"] == "user.already_exists"
    assert problem["errors"][0]["path"] == "email"


async def test_invalid_email_is_validation_error(async_client: AsyncClient) -> None:
    response = await async_client.post(USERS, json={"email": "not-an-email"})

    assert response.status_code == 422
    problem = response.json()
    assert problem["type"] == "validation_error"
    assert problem["errors"][0]["path"] == "email"
    assert problem["errors"][0]["location"] == "body"


async def test_unknown_group_rejects_user(async_client: AsyncClient) -> None:
    response = await async_client.post(
        USERS,
        json={"email": "jane@example.com", "assigned_groups": ["ghost"]},
    )

    assert response.status_code == 404
    problem = response.json()
    assert problem["errors"][0]["code"] == "group.not_found"
    assert problem["errors"][0]["value"] == "ghost"

    assert (await async_client.get(f"{USERS}/jane@example.com")).status_code == 404


async def test_roles_are_merged_on_create_and_update(async_client: AsyncClient) -> None:
    await _create_group(async_client, "g1", ["r2"])

    created = await async_client.post(
        USERS,
        json={"email": "jane@example.com", "assigned_roles": ["r1"], "assigned_groups": ["g1"]},
    )
    assert created.json()["assigned_roles"] == ["r1", "r2"]

    updated = await async_client.put(
        f"{USERS}/jane@example.com",
        json={"email": "jane@example.com", "assigned_roles": ["r3"], "assigned_groups": ["g1"]},
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["assigned_roles"] == ["r1", "r2", "r3"]
    assert updated.json()["rev"] != created.json()["rev"]
    assert updated.headers["ETag"] == f'"{updated.json()["rev"]}"'


async def test_stale_if_match_fails_update(async_client: AsyncClient) -> None:
    created = await async_client.post(USERS, json={"email": "jane@example.com"})
    stale_etag = created.headers["ETag"]
    await async_client.put(
        f"{USERS}/jane@example.com",
        json={"email": "jane@example.com", "first_name": "Jane"},
    )

    response = await async_client.put(
        f"{USERS}/jane@example.com",
        json={"email": "jane@example.com", "first_name": "Stale"},
        headers={"If-Match": stale_etag},
    )

    assert response.status_code == 500
    assert response.json()["type"] == "data_updating_failure"
    current = await async_client.get(f"{USERS}/jane@example.com")
    assert current.json()["first_name"] == "Jane"


async def test_update_missing_user(async_client: AsyncClient) -> None:
    response = await async_client.put(
        f"{USERS}/ghost@example.com",
        json={"email": "ghost@example.com"},
    )

    assert response.status_code == 404


async def test_delete_user(async_client: AsyncClient) -> None:
    await async_client.post(USERS, json={"email": "jane@example.com"})

    response = await async_client.delete(f"{USERS}/jane@example.com")

    assert response.status_code == 204
    assert response.content == b""
    assert (await async_client.get(f"{USERS}/jane@example.com")).status_code == 404
    assert (await async_client.delete(f"{USERS}/jane@example.com")).status_code == 404


async def test_list_users_pages(async_client: AsyncClient) -> None:
    for name in ("carol", "alice", "bob"):
        await async_client.post(USERS, json={"email": f"{name}@example.com"})

    first = await async_client.get(USERS, params={"rowsPerPage": 2})
    assert first.status_code == 200
    page = first.json()
    assert [item["id"] for item in page["items"]] == ["alice@example.com", "bob@example.com"]
    assert page["total_results"] == 3
    assert page["page_number"] == 1
    assert page["has_next"] is True
    assert page["has_previous"] is False

    second = await async_client.get(
        USERS, params={"rowsPerPage": 2, "param": page["next_param"]}
    )
    rest = second.json()
    assert [item["id"] for item in rest["items"]] == ["carol@example.com"]
    assert rest["has_next"] is False
    assert rest["has_previous"] is True


async def test_list_users_rejects_bad_query(async_client: AsyncClient) -> None:
    bad_cursor = await async_client.get(USERS, params={"param": "garbage!"})
    assert bad_cursor.status_code == 422
    assert bad_cursor.json()["errors"][0]["location"] == "query"

    bad_size = await async_client.get(USERS, params={"rowsPerPage": 0})
    assert bad_size.status_code == 422
    assert bad_size.json()["errors"][0]["path"] == "rowsPerPage"


async def test_update_cannot_change_email(async_client: AsyncClient) -> None:
    await async_client.post(USERS, json={"email": "jane@example.com"})

    response = await async_client.put(
        f"{USERS}/jane@example.com",
        json={"email": "john@example.com"},
    )

    assert response.status_code == 422
    problem = response.json()
    assert problem["errors"][0]["code"] == "user.id_mismatch"
    assert problem["errors"][0]["path"] == "email"
    assert problem["errors"][0]["location"] == "body"
