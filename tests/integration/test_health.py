from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_health_reports_store(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    names = {component["name"]: component["status"] for component in payload["components"]}
    assert names == {"api": "available", "store:sql": "available"}
