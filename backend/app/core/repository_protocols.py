"""Boundary Protocols — contracts between the data access service and its collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by the shell via explicit injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Cache.get returns None for a miss and raises CacheError for a malfunction;
      the service treats both the same way
"""

from datetime import datetime
from typing import Protocol

from app.core.domain_types import UserId, ItemId
from app.schemas.user import UserItemRow


class StoreClient(Protocol):
    """Contract for the transactional store — tagged read and read-write transactions."""
    async def create_user(
        self, user_id: UserId, name: str, timestamp: datetime,
    ) -> int: ...
    async def add_item_to_user(
        self, user_id: UserId, item_id: ItemId, timestamp: datetime,
    ) -> int: ...
    async def user_items(self, user_id: UserId) -> list[UserItemRow]: ...


class Cache(Protocol):
    """Contract for a key/value cache with a fixed per-entry TTL."""
    async def get(self, key: str) -> str | bytes | None: ...
    async def set(self, key: str, value: str) -> None: ...


class EventPublisher(Protocol):
    """Contract for the read-event side channel."""
    async def publish(self, payload: dict) -> None: ...
    async def close(self) -> None: ...
