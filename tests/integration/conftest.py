"""
HTTP fixtures: the real app with every provider bound to the per-test database.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from main import create_app
from portal.api.deps import (
    get_achievement_list_repository,
    get_achievement_repository,
    get_api_key_repository,
    get_app_repository,
    get_player_repository,
    get_storage_provider,
)
from portal.infrastructure.local.storage_provider import LocalStorageProvider


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(base_path=str(tmp_path / "storage"), base_url="http://test")


@pytest.fixture
def portal_app(app_repo, list_repo, achievement_repo, player_repo, api_key_repo, storage):
    app = create_app()
    app.dependency_overrides[get_app_repository] = lambda: app_repo
    app.dependency_overrides[get_achievement_list_repository] = lambda: list_repo
    app.dependency_overrides[get_achievement_repository] = lambda: achievement_repo
    app.dependency_overrides[get_player_repository] = lambda: player_repo
    app.dependency_overrides[get_api_key_repository] = lambda: api_key_repo
    app.dependency_overrides[get_storage_provider] = lambda: storage
    return app


@pytest_asyncio.fixture
async def client(portal_app):
    transport = ASGITransport(app=portal_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def scoped_list(client):
    """An app, a list and a key for it, created through the API."""
    response = await client.post("/api/apps", json={"title": "Space Miner"})
    assert response.status_code == 201, response.text
    app_id = response.json()["id"]

    response = await client.post("/api/lists", json={"appId": app_id, "title": "Main"})
    assert response.status_code == 201, response.text
    list_id = response.json()["id"]

    response = await client.post(f"/api/apikeys/{list_id}", json={})
    assert response.status_code == 201, response.text
    key = response.json()["key"]

    return {"app_id": app_id, "list_id": list_id, "key": key, "headers": {"x-api-key": key}}
