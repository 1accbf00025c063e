"""
PanelAPIClient tests against a fake aiohttp session.

The fake only implements what the client touches: ``request()`` used as an
async context manager, ``resp.status`` and ``resp.json()``.
"""
from __future__ import annotations

import pytest

from config import PanelConfig
from panel_api.client import APIError, PanelAPIClient
from state import Draft, Image, Node, Quota


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def json(self, content_type=None):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None, ssl=None):
        self.calls.append({"method": method, "url": url, "json": json, "ssl": ssl})
        return self.responses.pop(0)

    async def close(self):
        self.closed = True


SETTINGS = PanelConfig(url="https://panel.example.com/", token="tok")


def _client(*responses):
    session = FakeSession(*responses)
    return PanelAPIClient(SETTINGS, session=session), session


async def test_fetch_quota_reads_resources():
    client, session = _client(FakeResponse(200, {
        "success": True,
        "user": {"username": "alice"},
        "resources": {"slots": 2, "ram": 4096, "disk": 10240, "cpu": 200,
                      "databases": 1, "allocations": 2},
    }))
    quota = await client.fetch_quota()
    assert quota == Quota(slots=2, ram=4096, disk=10240, cpu=200, databases=1, allocations=2)
    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"] == "https://panel.example.com/api/auth/me"


async def test_fetch_quota_without_resources_fails():
    client, _ = _client(FakeResponse(200, {"success": True, "user": {}}))
    with pytest.raises(APIError):
        await client.fetch_quota()


async def test_fetch_identity():
    client, _ = _client(FakeResponse(200, {"success": True, "user": {"username": "alice"}}))
    assert (await client.fetch_identity())["username"] == "alice"


async def test_unauthorized_raises_with_status():
    client, _ = _client(FakeResponse(401, {"success": False, "message": "Not authenticated"}))
    with pytest.raises(APIError) as exc:
        await client.fetch_identity()
    assert exc.value.status == 401
    assert "Not authenticated" in str(exc.value)


async def test_fetch_images_maps_eggs():
    client, _ = _client(FakeResponse(200, {"success": True, "data": [
        {"id": 1, "eggId": 15, "name": "Paper", "description": "MC", "img": "https://x/p.png"},
    ]}))
    images = await client.fetch_images()
    assert images == [Image(id=1, display_id=15, name="Paper", description="MC",
                            icon_url="https://x/p.png")]


async def test_fetch_nodes_maps_location():
    client, session = _client(FakeResponse(200, {"success": True, "data": [
        {"id": 2, "nodeId": 3, "name": "fra-1", "location": "DE"},
    ]}))
    assert await client.fetch_nodes() == [Node(id=2, display_id=3, name="fra-1", region_code="DE")]
    assert session.calls[0]["url"].endswith("/api/nodes")


async def test_listing_must_be_a_list():
    client, _ = _client(FakeResponse(200, {"success": True, "data": {"oops": 1}}))
    with pytest.raises(APIError):
        await client.fetch_nodes()


async def test_listing_success_false_raises():
    client, _ = _client(FakeResponse(200, {"success": False, "message": "Failed to fetch eggs"}))
    with pytest.raises(APIError) as exc:
        await client.fetch_images()
    assert "Failed to fetch eggs" in str(exc.value)


async def test_non_json_body_raises():
    client, _ = _client(FakeResponse(502, ValueError("not json")))
    with pytest.raises(APIError) as exc:
        await client.fetch_images()
    assert exc.value.status == 502


async def test_create_server_posts_payload():
    client, session = _client(FakeResponse(201, {"success": True, "server": {
        "id": 9, "pterodactylId": 40, "name": "web", "identifier": "1a2b3c4d", "uuid": "u",
    }}))
    draft = Draft(name="web", image_id=15, node_id=3)
    result = await client.create_server(draft)
    assert result == {"success": True, "handle": "1a2b3c4d"}
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/api/servers")
    assert call["json"] == draft.to_payload()


async def test_create_server_falls_back_to_id():
    client, _ = _client(FakeResponse(201, {"success": True, "server": {"id": 9}}))
    assert await client.create_server(Draft(name="web")) == {"success": True, "handle": "9"}


async def test_create_server_rejection_is_returned():
    client, _ = _client(FakeResponse(400, {
        "success": False, "error": "Can't create server while having no server slots",
    }))
    result = await client.create_server(Draft(name="web"))
    assert result == {
        "success": False, "error": "Can't create server while having no server slots",
    }


async def test_create_server_server_error_raises():
    client, _ = _client(FakeResponse(500, {"success": False, "error": "Failed to create server"}))
    with pytest.raises(APIError):
        await client.create_server(Draft(name="web"))


async def test_injected_session_is_not_closed():
    client, session = _client()
    async with client:
        pass
    assert not session.closed
