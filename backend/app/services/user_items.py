"""User Items Service — validation, tagged transactions, cache-aside reads, read events.

Invariants:
    - Validation always precedes any store access; a rejected input never reaches the store
    - Writes are one store transaction each; store errors propagate unchanged
    - Reads check the cache first; a hit never touches the store
    - Any cache failure (backend error, timeout, corrupt payload) degrades to a store read
    - Exactly one read event per successful read, emitted after the result is known,
      whichever path produced it; publishing never fails the read
    - Every operation runs under one deadline; a store call past it fails with
      StoreError(deadline_exceeded)

Design Decisions:
    - AddItemToUser does NOT invalidate the user's cached item list: a read may be
      stale for up to the cache TTL after a write. Kept deliberately; see DESIGN.md
    - Collaborators (store, cache, publisher, validator) injected explicitly, no globals
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from pydantic import ValidationError

from app.core.cache_keys import user_items_key
from app.core.domain_types import UserId, ItemId
from app.core.errors import CacheError, StoreError, StoreFailure, ErrorContext
from app.core.repository_protocols import StoreClient, Cache, EventPublisher
from app.core.validation import ParamValidator
from app.infrastructure.observability import span
from app.schemas.user import UserCreated, UserItemRow, UserItemRows

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 60.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserItemsService:
    """Data access service for users and the items they own."""

    def __init__(
        self,
        store: StoreClient,
        cache: Cache,
        publisher: EventPublisher,
        validator: ParamValidator,
        revision: str = "",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        now: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._cache = cache
        self._publisher = publisher
        self._validator = validator
        self.revision = revision
        self.timeout_seconds = timeout_seconds
        self._now = now

    # ─── Writes ──────────────────────────────────────────────────

    async def create_user(
        self, name: str, user_id: str | None = None,
    ) -> UserCreated:
        """Insert a new user. The id is a fresh UUIDv4 unless one is supplied."""
        deadline = self._deadline()
        with span("CreateUser"):
            with span("validate"):
                params = self._validator.check_new_user(
                    user_id if user_id is not None else str(uuid.uuid4()), name,
                )
            await self._within_deadline(
                deadline, "create_user",
                lambda: self._store.create_user(
                    UserId(params.user_id), params.user_name, self._now(),
                ),
                ErrorContext(user_id=params.user_id),
            )
        return UserCreated(id=params.user_id, name=params.user_name)

    async def add_item_to_user(self, user_id: str, item_id: str) -> None:
        """Record that the user owns the item.

        Existence of either side is the store's foreign keys' business. The cached
        item list for the user is left as is and expires on its own.
        """
        deadline = self._deadline()
        with span("AddItemUser"):
            with span("validate"):
                user, item = self._validator.check_user_item(user_id, item_id)
            await self._within_deadline(
                deadline, "add_item_to_user",
                lambda: self._store.add_item_to_user(
                    UserId(user.user_id), ItemId(item.item_id), self._now(),
                ),
                ErrorContext(user_id=user.user_id, item_id=item.item_id),
            )

    # ─── Reads ───────────────────────────────────────────────────

    async def user_items(self, user_id: str) -> list[UserItemRow]:
        """Items owned by the user, served cache-aside. Unknown users yield []."""
        deadline = self._deadline()
        key = user_items_key(user_id)
        with span("UserItems", user_id=user_id):
            rows = await self._cached_rows(key, deadline)
            if rows is None:
                rows = await self._within_deadline(
                    deadline, "user_items",
                    lambda: self._store.user_items(UserId(user_id)),
                    ErrorContext(user_id=user_id),
                )
                await self._populate(key, rows, deadline)
            await self._publish_read(user_id)
        return rows

    async def _cached_rows(
        self, key: str, deadline: float,
    ) -> list[UserItemRow] | None:
        with span("GetCache", cache_key=key):
            try:
                async with asyncio.timeout_at(deadline):
                    data = await self._cache.get(key)
            except (CacheError, TimeoutError) as e:
                logger.warning(
                    f"Cache get failed, falling back to store: {e}",
                    extra={"cache_key": key},
                )
                return None
        if data is None:
            return None
        with span("JsonUnmarshal", cache_key=key):
            try:
                rows = UserItemRows.validate_json(data)
            except ValidationError as e:
                logger.warning(
                    f"Corrupt cache entry, falling back to store: {e}",
                    extra={"cache_key": key},
                )
                return None
        logger.info(
            f"{key} from cache", extra={"cache_key": key, "source": "cache"},
        )
        return rows

    async def _populate(
        self, key: str, rows: list[UserItemRow], deadline: float,
    ) -> None:
        with span("setResults", cache_key=key):
            payload = UserItemRows.dump_json(rows).decode()
            try:
                async with asyncio.timeout_at(deadline):
                    await self._cache.set(key, payload)
            except (CacheError, TimeoutError) as e:
                logger.warning(
                    f"Cache set failed: {e}", extra={"cache_key": key},
                )

    async def _publish_read(self, user_id: str) -> None:
        payload = {"id": user_id, "rev": self.revision}
        with span("PublishLog", user_id=user_id):
            try:
                await self._publisher.publish(payload)
            except Exception as e:
                # publishers log their own failures; this guards the read path
                logger.error(
                    f"Read event not published: {e}",
                    extra={"user_id": user_id}, exc_info=True,
                )

    # ─── Deadline ────────────────────────────────────────────────

    def _deadline(self) -> float:
        return asyncio.get_running_loop().time() + self.timeout_seconds

    async def _within_deadline(
        self,
        deadline: float,
        operation: str,
        call: Callable[[], Awaitable[T]],
        context: ErrorContext,
    ) -> T:
        try:
            async with asyncio.timeout_at(deadline):
                return await call()
        except TimeoutError as e:
            logger.error(
                f"Deadline exceeded during {operation}",
                extra={"user_id": context.user_id},
            )
            raise StoreError(
                "deadline exceeded", operation,
                StoreFailure.DEADLINE_EXCEEDED, context,
            ) from e
