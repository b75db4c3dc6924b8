"""HTTP tests for role routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_role_lifecycle(async_client: AsyncClient) -> None:
    created = await async_client.post(
        "/api/v1/roles",
        json={"name": "admin", "description": "All access"},
    )
    assert created.status_code == 201, created.text
    role = created.json()
    assert role["id"] == "admin"
    assert role["type"] == "role"

    read = await async_client.get("/api/v1/roles/admin")
    assert read.status_code == 200
    assert read.headers["ETag"] == created.headers["ETag"]

    updated = await async_client.put(
        "/api/v1/roles/admin",
        json={"name": "admin", "description": "Everything"},
    )
    assert updated.status_code == 200
    assert updated.json()["description"] == "Everything"
    assert updated.json()["created_at"] == role["created_at"]

    stale_delete = await async_client.delete(
        "/api/v1/roles/admin",
        headers={"If-Match": created.headers["ETag"]},
    )
    assert stale_delete.status_code == 500
    assert stale_delete.json()["type"] == "data_removal_failure"

    deleted = await async_client.delete("/api/v1/roles/admin")
    assert deleted.status_code == 200
    assert (await async_client.get("/api/v1/roles/admin")).status_code == 404


async def test_role_duplicate_check_is_per_type(async_client: AsyncClient) -> None:
    group = await async_client.post("/api/v1/group", json={"name": "admin"})
    assert group.status_code == 201

    role = await async_client.post("/api/v1/roles", json={"name": "admin"})
    assert role.status_code == 201

    duplicate = await async_client.post("/api/v1/roles", json={"name": "admin"})
    assert duplicate.status_code == 409
    assert duplicate.json()["errors"][0]["code"] == "role.already_exists"


async def test_list_roles_empty(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/v1/roles")

    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["total_results"] == 0
