"""
Workbench Backend: Health Endpoint Tests
=========================================
"""

import pytest

from workbench.services.provisioning import teardown_collections


@pytest.mark.asyncio
async def test_healthy(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["collections"] == {
        "datasets": True,
        "models": True,
        "experiments": True,
        "notebooks": True,
    }


@pytest.mark.asyncio
async def test_degraded_when_collection_missing(test_client, session_factory):
    async with session_factory() as session:
        await teardown_collections(session, ["notebooks"])
        await session.commit()

    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["collections"]["notebooks"] is False
