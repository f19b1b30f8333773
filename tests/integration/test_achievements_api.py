"""
Integration tests for the achievement endpoints.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from portal.utils.datetime_utils import now_utc


async def _create(client, scoped_list, title, **fields):
    body = {"title": title, "type": "progress", "progressGoal": 10, **fields}
    response = await client.post(
        f"/api/lists/{scoped_list['list_id']}/achievements",
        json=body,
        headers=scoped_list["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _list(client, scoped_list):
    response = await client.get(
        f"/api/lists/{scoped_list['list_id']}/achievements", headers=scoped_list["headers"]
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_missing_key_is_401(client, scoped_list):
    response = await client.get(f"/api/lists/{scoped_list['list_id']}/achievements")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_key_is_403(client, scoped_list):
    response = await client.get(
        f"/api/lists/{scoped_list['list_id']}/achievements",
        headers={"x-api-key": "not-a-real-key"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_key_for_other_list_is_403(client, scoped_list):
    response = await client.post(
        "/api/lists", json={"appId": scoped_list["app_id"], "title": "Other"}
    )
    other_list_id = response.json()["id"]

    response = await client.post(
        f"/api/lists/{other_list_id}/achievements",
        json={"title": "Sneaky", "type": "milestone"},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_expired_key_is_403(client, scoped_list):
    expired = (now_utc() - timedelta(days=1)).isoformat()
    response = await client.post(
        f"/api/apikeys/{scoped_list['list_id']}", json={"expDate": expired}
    )
    assert response.status_code == 201

    response = await client.get(
        f"/api/lists/{scoped_list['list_id']}/achievements",
        headers={"x-api-key": response.json()["key"]},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_and_list_in_order(client, scoped_list):
    first = await _create(client, scoped_list, "First")
    second = await _create(client, scoped_list, "Second", type="milestone", isHidden=True)

    assert first["order"] == 1
    assert first["listId"] == scoped_list["list_id"]
    assert first["progressGoal"] == 10
    assert second["order"] == 2
    assert second["progressGoal"] == 1
    assert second["isHidden"] is True
    assert second["imageUrl"] == ""

    listed = await _list(client, scoped_list)
    assert [a["title"] for a in listed] == ["First", "Second"]

    response = await client.get(f"/api/lists/{scoped_list['list_id']}")
    assert response.json()["achievementIds"] == [first["id"], second["id"]]


@pytest.mark.asyncio
async def test_create_requires_title_and_type(client, scoped_list):
    response = await client.post(
        f"/api/lists/{scoped_list['list_id']}/achievements",
        json={"description": "nothing else"},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Title and type are required."


@pytest.mark.asyncio
async def test_create_with_bad_type_is_422(client, scoped_list):
    response = await client.post(
        f"/api/lists/{scoped_list['list_id']}/achievements",
        json={"title": "Odd", "type": "trophy"},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_patch_order_moves_achievement(client, scoped_list):
    created = [await _create(client, scoped_list, f"A{i}") for i in range(1, 6)]

    response = await client.patch(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created[1]['id']}",
        json={"order": 5},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 200, response.text
    assert response.json()["order"] == 5

    listed = await _list(client, scoped_list)
    assert [a["title"] for a in listed] == ["A1", "A3", "A4", "A5", "A2"]
    assert [a["order"] for a in listed] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_patch_out_of_range_order_is_400(client, scoped_list):
    created = await _create(client, scoped_list, "Only")

    response = await client.patch(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created['id']}",
        json={"order": 2},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_patch_unknown_achievement_is_404(client, scoped_list):
    response = await client.patch(
        f"/api/lists/{scoped_list['list_id']}/achievements/{uuid4()}",
        json={"title": "Ghost"},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reorder_route(client, scoped_list):
    created = [await _create(client, scoped_list, f"A{i}") for i in range(1, 4)]
    ordered = [created[2]["id"], created[0]["id"], created[1]["id"]]

    response = await client.patch(
        f"/api/lists/{scoped_list['list_id']}/achievements/reorder",
        json={"orderedIds": ordered},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 200, response.text
    assert [a["id"] for a in response.json()] == ordered

    response = await client.get(f"/api/lists/{scoped_list['list_id']}")
    assert response.json()["achievementIds"] == ordered


@pytest.mark.asyncio
async def test_reorder_with_foreign_id_is_400(client, scoped_list):
    created = [await _create(client, scoped_list, f"A{i}") for i in range(1, 3)]

    response = await client.patch(
        f"/api/lists/{scoped_list['list_id']}/achievements/reorder",
        json={"orderedIds": [created[0]["id"], str(uuid4())]},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 400
    assert "does not exist in this list" in response.json()["detail"]

    listed = await _list(client, scoped_list)
    assert [a["id"] for a in listed] == [a["id"] for a in created]


@pytest.mark.asyncio
async def test_bulk_replace(client, scoped_list):
    created = [await _create(client, scoped_list, f"A{i}") for i in range(1, 3)]

    response = await client.put(
        f"/api/lists/{scoped_list['list_id']}/achievements",
        json={
            "achievements": [
                {"id": created[0]["id"], "order": 3, "description": "moved"},
                {"title": "New", "type": "milestone", "order": 1},
            ]
        },
        headers=scoped_list["headers"],
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert [a["title"] for a in body] == ["New", "A2", "A1"]
    assert [a["order"] for a in body] == [1, 2, 3]
    assert body[2]["description"] == "moved"


@pytest.mark.asyncio
async def test_delete_closes_gap(client, scoped_list):
    created = [await _create(client, scoped_list, f"A{i}") for i in range(1, 4)]

    response = await client.delete(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created[0]['id']}",
        headers=scoped_list["headers"],
    )
    assert response.status_code == 204

    listed = await _list(client, scoped_list)
    assert [(a["title"], a["order"]) for a in listed] == [("A2", 1), ("A3", 2)]

    response = await client.delete(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created[0]['id']}",
        headers=scoped_list["headers"],
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_upload_image(client, scoped_list, storage):
    created = await _create(client, scoped_list, "Pictured")

    response = await client.post(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created['id']}/uploadImage",
        files={"image": ("badge.png", b"\x89PNG image", "image/png")},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 200, response.text
    image_url = response.json()["imageUrl"]
    assert image_url.startswith(f"http://test/storage/achievements/{created['id']}_")
    assert (storage.base_path / image_url.split("/storage/", 1)[1]).exists()

    listed = await _list(client, scoped_list)
    assert listed[0]["imageUrl"] == image_url


@pytest.mark.asyncio
async def test_upload_empty_image_is_400(client, scoped_list):
    created = await _create(client, scoped_list, "Pictured")

    response = await client.post(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created['id']}/uploadImage",
        files={"image": ("badge.png", b"", "image/png")},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_type_change_resets_player_progress(client, scoped_list):
    created = await _create(client, scoped_list, "Gatherer")
    progress_url = f"/api/apps/{scoped_list['app_id']}/players/p1/progress"

    response = await client.patch(
        progress_url, json={"achievementId": created["id"], "progressDelta": 7}
    )
    assert response.status_code == 200, response.text
    assert response.json()["achievementsProgress"][0]["progress"] == 7

    response = await client.patch(
        f"/api/lists/{scoped_list['list_id']}/achievements/{created['id']}",
        json={"type": "milestone"},
        headers=scoped_list["headers"],
    )
    assert response.status_code == 200, response.text

    response = await client.get(f"/api/apps/{scoped_list['app_id']}/players/p1")
    record = response.json()["achievementsProgress"][0]
    assert record["progress"] == 0
    assert record["dateUnlocked"] is None
