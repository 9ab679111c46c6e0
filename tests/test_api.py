"""HTTP contract tests for ingestion, listing, discovery and deletion."""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from hookvault.adapters.memory import InMemoryStore
from hookvault.errors import StoreUnavailable
from hookvault.keys import NO_KEY
from hookvault.main import create_app
from conftest import make_settings


class DownStore(InMemoryStore):
    async def list(self, prefix="", cursor=None, limit=1000):
        raise StoreUnavailable("backend down")

    async def delete(self, key):
        raise StoreUnavailable("backend down")

    async def health_check(self):
        return False


class ExplodingStore(InMemoryStore):
    async def get(self, key):
        raise RuntimeError("disk on fire")


@pytest_asyncio.fixture
async def restricted_client():
    app = create_app(make_settings(ALLOWED_NAMESPACES="demo"), store=InMemoryStore())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def down_client():
    app = create_app(make_settings(), store=DownStore())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_scenario_a_ingest_with_namespace(client, store):
    """Ingest under "demo" is stored as demo:<id> and discovered."""
    response = await client.post(
        "/webhook",
        json={"orderId": "123", "status": "paid"},
        headers={"key": "demo"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert await store.get(f"demo:{data['id']}") is not None

    keys = await client.get("/api/keys")
    assert keys.json()["keys"] == ["demo"]


@pytest.mark.asyncio
async def test_scenario_b_ingest_without_namespace(client, store):
    """Ingest without a namespace lands under NO-KEY and is not discovered."""
    response = await client.post("/api/webhook", json={"ping": "pong"})
    assert response.status_code == 200
    event_id = response.json()["id"]
    assert await store.get(f"{NO_KEY}:{event_id}") is not None

    keys = await client.get("/api/keys")
    assert keys.json() == {"keys": [], "truncated": False}


@pytest.mark.asyncio
async def test_scenario_c_paginated_listing(client):
    ids = []
    for i in range(3):
        r = await client.post("/webhook", json={"n": i}, headers={"key": "demo"})
        ids.append(r.json()["id"])
    ids.sort()

    first = (await client.get("/api/events", params={"key": "demo", "limit": 1})).json()
    assert len(first["events"]) == 1
    assert first["listComplete"] is False
    assert "cursor" in first
    assert first["events"][0]["id"] == ids[0]

    second = (await client.get(
        "/api/events", params={"key": "demo", "limit": 1, "cursor": first["cursor"]}
    )).json()
    assert [e["id"] for e in second["events"]] == [ids[1]]

    rest = (await client.get(
        "/api/events", params={"key": "demo", "limit": 50, "cursor": second["cursor"]}
    )).json()
    assert [e["id"] for e in rest["events"]] == [ids[2]]
    assert rest["listComplete"] is True
    assert "cursor" not in rest


@pytest.mark.asyncio
async def test_scenario_d_batch_delete(client):
    ids = []
    for i in range(3):
        r = await client.post("/webhook", json={"n": i}, headers={"key": "demo"})
        ids.append(r.json()["id"])

    response = await client.request("DELETE", "/api/events", json={"namespace": "demo", "ids": ids[:2]})
    assert response.status_code == 200
    assert response.json() == {"ok": True, "deleted": 2}

    gone = await client.get(f"/api/events/{ids[0]}", params={"key": "demo"})
    assert gone.status_code == 404
    kept = await client.get(f"/api/events/{ids[2]}", params={"key": "demo"})
    assert kept.status_code == 200
    assert kept.json()["body"] == {"n": 2}


@pytest.mark.asyncio
async def test_delete_accepts_legacy_key_field_and_caps_ids(client):
    ids = [f"id-{i}" for i in range(600)]
    response = await client.request("DELETE", "/api/events", json={"key": "demo", "ids": ids})
    assert response.json() == {"ok": True, "deleted": 500}


@pytest.mark.asyncio
async def test_delete_requires_ids(client):
    response = await client.request("DELETE", "/api/events", json={"namespace": "demo", "ids": []})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_event_record_shape(client):
    r = await client.post("/webhook", json={"a": None, "b": True}, headers={"key": "demo"})
    event_id = r.json()["id"]

    record = (await client.get(f"/api/events/{event_id}", params={"key": "demo"})).json()

    assert set(record) == {"id", "namespace", "receivedAt", "body"}
    assert record["namespace"] == "demo"
    assert record["body"] == {"a": None, "b": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("headers, params, expected", [
    ({"key": "from-header"}, {}, "from-header"),
    ({}, {"api_key": "from-query"}, "from-query"),
    ({"x-api-key": "legacy"}, {}, "legacy"),
    ({"key": "  "}, {}, NO_KEY),
])
async def test_ingest_namespace_sources(client, store, headers, params, expected):
    r = await client.post("/webhook", json={"a": 1}, headers=headers, params=params)
    assert await store.get(f"{expected}:{r.json()['id']}") is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("body, error", [
    ({"a": {"b": 1}}, "NestedValue"),
    ({"a": [1, 2]}, "NestedValue"),
    ([1, 2], "NotObject"),
])
async def test_ingest_rejects_non_flat_bodies(client, store, body, error):
    response = await client.post("/webhook", json=body, headers={"key": "demo"})
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == error
    assert data["path"] == "/webhook"
    assert len(store) == 0


@pytest.mark.asyncio
async def test_ingest_invalid_json(client, store):
    response = await client.post(
        "/webhook", content=b"{invalid json}", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidJson"
    assert len(store) == 0


@pytest.mark.asyncio
async def test_ingest_payload_too_large(client, settings):
    response = await client.post("/webhook", json={"data": "x" * (settings.MAX_EVENT_SIZE + 10)})
    assert response.status_code == 413
    data = response.json()
    assert data["error"] == "PayloadTooLarge"
    assert data["max_size"] == settings.MAX_EVENT_SIZE


@pytest.mark.asyncio
async def test_allowlist_gates_every_operation(restricted_client):
    forbidden = await restricted_client.post("/webhook", json={"a": 1}, headers={"key": "other"})
    assert forbidden.status_code == 403
    assert forbidden.json()["error"] == "ForbiddenNamespace"

    allowed = await restricted_client.post("/webhook", json={"a": 1}, headers={"key": "demo"})
    assert allowed.status_code == 200

    no_key = await restricted_client.post("/webhook", json={"a": 1})
    assert no_key.status_code == 403

    listing = await restricted_client.get("/api/events", params={"key": "other"})
    assert listing.status_code == 403

    delete = await restricted_client.request("DELETE", "/api/events", json={"namespace": "other", "ids": ["x"]})
    assert delete.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("limit, expected", [("abc", 50), ("0", 50), ("-4", 1), ("500", 60), ("7", 7)])
async def test_list_limit_parsing(client, limit, expected):
    for i in range(60):
        await client.post("/webhook", json={"n": i}, headers={"key": "demo"})

    data = (await client.get("/api/events", params={"key": "demo", "limit": limit})).json()
    assert len(data["events"]) == expected


@pytest.mark.asyncio
async def test_list_namespace_from_header(client):
    await client.post("/webhook", json={"a": 1}, headers={"key": "demo"})
    data = (await client.get("/api/events", headers={"key": "demo"})).json()
    assert len(data["events"]) == 1


@pytest.mark.asyncio
async def test_read_paths_degrade_when_store_down(down_client):
    events = await down_client.get("/api/events", params={"key": "demo"})
    assert events.status_code == 200
    assert events.json() == {"events": [], "listComplete": True, "error": "backend down"}

    keys = await down_client.get("/api/keys")
    assert keys.status_code == 200
    assert keys.json() == {"keys": [], "truncated": False, "error": "backend down"}


@pytest.mark.asyncio
async def test_delete_fails_hard_when_store_down(down_client):
    response = await down_client.request("DELETE", "/api/events", json={"namespace": "demo", "ids": ["a"]})
    assert response.status_code == 503
    assert response.json()["error"] == "StoreUnavailable"


@pytest.mark.asyncio
async def test_correlation_id_round_trip(client):
    response = await client.post("/webhook", json={"a": 1}, headers={"X-Correlation-ID": "corr-123"})
    assert response.headers["x-correlation-id"] == "corr-123"

    rejected = await client.post("/webhook", json=[1], headers={"X-Correlation-ID": "corr-456"})
    assert rejected.json()["correlation_id"] == "corr-456"


@pytest.mark.asyncio
async def test_missing_event_has_structured_body(client):
    response = await client.get("/api/events/nope", params={"key": "demo"}, headers={"X-Correlation-ID": "corr-404"})
    assert response.status_code == 404
    assert response.json() == {
        "error": "NotFound",
        "message": "Event nope not found",
        "correlation_id": "corr-404",
        "path": "/api/events/nope",
    }


@pytest.mark.asyncio
async def test_unknown_route_has_structured_body(client):
    response = await client.get("/does-not-exist")
    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "NotFound"
    assert data["path"] == "/does-not-exist"
    assert "detail" not in data


@pytest.mark.asyncio
async def test_request_validation_has_structured_body(client):
    response = await client.request("DELETE", "/api/events", json={"namespace": "demo"})
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "ValidationError"
    assert data["path"] == "/api/events"
    assert data["details"][0]["loc"] == ["body", "ids"]


@pytest.mark.asyncio
async def test_unexpected_error_has_structured_body():
    app = create_app(make_settings(), store=ExplodingStore())
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/events/x", params={"key": "demo"})

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "InternalServerError"
    assert data["message"] == "An unexpected error occurred"
    assert data["path"] == "/api/events/x"
    assert "disk on fire" not in response.text
