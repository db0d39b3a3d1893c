"""Integration Tests: UserItemsService — writes, cache-aside reads, read events.

Invariants:
    - create_user returns a fresh UUIDv4 per call
    - Invalid ids never reach the store (store call counter stays at zero)
    - A second read inside the TTL is served from the cache, identical, without the store
    - add_item_to_user leaves the cached list alone; after the TTL the item shows up
    - Exactly one read event per read, on both the cache and the store path

Design Decisions:
    - Real SQLite store behind CountingStore; cache TTL driven by ManualClock
    - Failure modes (cache down, deadlines, publisher errors) live in
      test_user_items_resilience.py
"""

import uuid

import pytest

from app.core.cache_keys import user_items_key
from app.core.errors import InputValidationError, StoreError, StoreFailure
from app.schemas.user import UserItemRow, UserItemRows


# ==============================================================================
# CreateUser
# ==============================================================================


async def test_create_user_returns_fresh_uuid(service):
    first = await service.create_user("foo")
    second = await service.create_user("foo")

    assert first.name == "foo"
    assert uuid.UUID(first.id).version == 4
    assert first.id != second.id


async def test_create_user_many_ids_unique(service):
    ids = {(await service.create_user(f"user-{n}")).id for n in range(20)}
    assert len(ids) == 20


async def test_create_user_with_existing_id_propagates_store_error(service):
    created = await service.create_user("foo")

    with pytest.raises(StoreError) as exc_info:
        await service.create_user("bar", user_id=created.id)

    assert exc_info.value.reason is StoreFailure.CONSTRAINT


@pytest.mark.parametrize("user_id", ["", "x" * 37])
async def test_create_user_invalid_id_never_reaches_store(service, store, user_id):
    with pytest.raises(InputValidationError):
        await service.create_user("foo", user_id=user_id)
    assert store.total == 0


@pytest.mark.parametrize("name", ["", "n" * 65])
async def test_create_user_invalid_name_never_reaches_store(service, store, name):
    with pytest.raises(InputValidationError) as exc_info:
        await service.create_user(name)
    assert exc_info.value.violations[0]["field"] == "user_name"
    assert store.total == 0


# ==============================================================================
# AddItemToUser
# ==============================================================================


async def test_add_item_to_user_then_read(service):
    user = await service.create_user("foo")

    result = await service.add_item_to_user(user.id, "item-2")

    assert result is None
    assert await service.user_items(user.id) == [
        UserItemRow(user_name="foo", item_name="shield", item_id="item-2"),
    ]


@pytest.mark.parametrize(
    "user_id,item_id",
    [("", "item-1"), ("x" * 37, "item-1"), ("u-1", ""), ("u-1", "i" * 37)],
)
async def test_add_item_invalid_params_never_reach_store(service, store, user_id, item_id):
    with pytest.raises(InputValidationError):
        await service.add_item_to_user(user_id, item_id)
    assert store.total == 0


async def test_add_item_reports_every_violation(service, store):
    with pytest.raises(InputValidationError) as exc_info:
        await service.add_item_to_user("", "")

    fields = {v["field"] for v in exc_info.value.violations}
    assert fields == {"user_id", "item_id"}


async def test_add_nonexistent_item_is_store_error_and_no_row(service, store):
    user = await service.create_user("foo")

    with pytest.raises(StoreError):
        await service.add_item_to_user(user.id, "no-such-item")

    assert store.calls["add_item_to_user"] == 1
    assert await service.user_items(user.id) == []


# ==============================================================================
# UserItems — cache-aside
# ==============================================================================


async def test_unknown_user_reads_empty(service):
    assert await service.user_items("nobody") == []


async def test_second_read_within_ttl_served_from_cache(service, store, cache):
    user = await service.create_user("foo")
    await service.add_item_to_user(user.id, "item-1")

    first = await service.user_items(user.id)
    second = await service.user_items(user.id)

    assert store.calls["user_items"] == 1
    assert UserItemRows.dump_json(first) == UserItemRows.dump_json(second)
    assert user_items_key(user.id) in cache.entries


async def test_read_populates_cache_with_json_rows(service, cache):
    user = await service.create_user("foo")
    await service.add_item_to_user(user.id, "item-3")

    await service.user_items(user.id)

    raw, _ = cache.entries[f"UserItems_{user.id}"]
    assert UserItemRows.validate_json(raw) == [
        UserItemRow(user_name="foo", item_name="potion", item_id="item-3"),
    ]


async def test_empty_result_is_cached_too(service, store):
    await service.user_items("nobody")
    await service.user_items("nobody")
    assert store.calls["user_items"] == 1


async def test_added_item_may_be_stale_until_ttl_expires(service, store, clock):
    user = await service.create_user("foo")
    assert await service.user_items(user.id) == []

    await service.add_item_to_user(user.id, "item-1")
    stale = await service.user_items(user.id)

    assert stale == []
    assert store.calls["user_items"] == 1

    clock.advance(2.0)
    fresh = await service.user_items(user.id)

    assert [r.item_id for r in fresh] == ["item-1"]
    assert store.calls["user_items"] == 2


async def test_end_to_end_create_read_add_expire_read(service, clock):
    user = await service.create_user("foo")
    assert await service.user_items(user.id) == []

    await service.add_item_to_user(user.id, "item-1")
    clock.advance(2.5)

    assert await service.user_items(user.id) == [
        UserItemRow(user_name="foo", item_name="sword", item_id="item-1"),
    ]


# ==============================================================================
# Read events
# ==============================================================================


async def test_read_event_on_store_path(service, publisher):
    await service.user_items("u-42")

    assert publisher.published == [{"id": "u-42", "rev": "rev-00001"}]


async def test_read_event_on_cache_path(service, publisher, store):
    await service.user_items("u-42")
    await service.user_items("u-42")

    assert store.calls["user_items"] == 1
    assert publisher.published == [
        {"id": "u-42", "rev": "rev-00001"},
        {"id": "u-42", "rev": "rev-00001"},
    ]


async def test_writes_emit_no_read_event(service, publisher):
    user = await service.create_user("foo")
    await service.add_item_to_user(user.id, "item-1")

    assert publisher.published == []
