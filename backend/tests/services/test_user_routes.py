"""User routes — HTTP contract of the original service over the test service.

Invariants:
    - POST /api/user/{name} → {"id", "name"}
    - GET /api/user_id/{id} → list of {user_name, item_name, item_id}
    - PUT /api/user_id/{id}/{item} → {}
    - Validation errors → 400 envelope; store errors → 5xx envelope
"""

import pytest

from app.core.errors import StoreError, StoreFailure

from tests.services.fakes import SlowStore


async def test_ping(client):
    res = await client.get("/ping")
    assert res.status_code == 200
    assert res.text == "Pong\n"


async def test_create_user_returns_id_and_name(client):
    res = await client.post("/api/user/foo")

    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "foo"
    assert len(body["id"]) == 36


async def test_full_flow_over_http(client, clock):
    user_id = (await client.post("/api/user/foo")).json()["id"]

    res = await client.get(f"/api/user_id/{user_id}")
    assert res.status_code == 200
    assert res.json() == []

    res = await client.put(f"/api/user_id/{user_id}/item-1")
    assert res.status_code == 200
    assert res.json() == {}

    clock.advance(3)
    res = await client.get(f"/api/user_id/{user_id}")
    assert res.json() == [
        {"user_name": "foo", "item_name": "sword", "item_id": "item-1"},
    ]


async def test_unknown_item_is_server_error(client):
    user_id = (await client.post("/api/user/foo")).json()["id"]

    res = await client.put(f"/api/user_id/{user_id}/no-such-item")

    assert res.status_code == 500
    assert res.json()["error"]["code"] == "STORE_CONSTRAINT"


async def test_path_pattern_rejects_uppercase(client, store):
    res = await client.post("/api/user/Foo")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert store.total == 0


async def test_too_long_user_id_is_validation_error(client, store):
    res = await client.put(f"/api/user_id/{'a' * 37}/item-1")

    assert res.status_code == 400
    body = res.json()["error"]
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "user_id"
    assert store.total == 0


async def test_deadline_exceeded_is_504(client, service, monkeypatch):
    monkeypatch.setattr(service, "_store", SlowStore(delay=5))
    monkeypatch.setattr(service, "timeout_seconds", 0.05)

    res = await client.get("/api/user_id/u-1")

    assert res.status_code == 504
    assert res.json()["error"]["code"] == "STORE_DEADLINE_EXCEEDED"


@pytest.mark.parametrize(
    "reason,status",
    [
        (StoreFailure.CONSTRAINT, 500),
        (StoreFailure.UNAVAILABLE, 503),
        (StoreFailure.DEADLINE_EXCEEDED, 504),
        (StoreFailure.UNKNOWN, 500),
    ],
)
async def test_store_failure_maps_to_status(client, service, monkeypatch, reason, status):
    async def failing(name, user_id=None):
        raise StoreError("boom", "CreateUser", reason)

    monkeypatch.setattr(service, "create_user", failing)

    res = await client.post("/api/user/foo")

    assert res.status_code == status
    assert res.json()["error"]["code"] == f"STORE_{reason.value.upper()}"


async def test_bad_path_param_names_the_field(client):
    res = await client.put("/api/user_id/u-1/BAD")

    assert res.status_code == 400
    details = res.json()["error"]["details"]
    assert [d["field"] for d in details] == ["item_id"]
    assert details[0]["type"] == "string_pattern_mismatch"
