"""Transactional Store Client — tagged read and read-write transactions over users/items.

Invariants:
    - Each write is one parameterized INSERT inside one read-write transaction
    - All rows of one write share the caller-supplied timestamp
    - Every transaction carries a tag (func=..,env=..), every statement a request tag
      (func=..,env=..,action=..); tags never change what the statement does
    - Reads run in a read-only snapshot transaction that is released on every exit
    - Duplicate primary keys and dangling foreign keys fail as StoreError, never overwrite

Design Decisions:
    - Core insert against the mapped tables: rowcount is available for diagnostics
    - Row order is whatever the store returns; no ORDER BY is imposed
"""

import logging
from datetime import datetime

from sqlalchemy import Insert, insert, select

from app.core.domain_types import UserId, ItemId, Operation, StatementAction
from app.core.transaction_tags import transaction_tag, request_tag, sql_comment
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.observability import span
from app.models.item import Item
from app.models.user import User
from app.models.user_item import UserItem
from app.schemas.user import UserItemRow

logger = logging.getLogger(__name__)


class SqlStore:
    """StoreClient backed by SQLAlchemy (PostgreSQL in production, SQLite in tests)."""

    def __init__(self, db: DatabaseSessionManager, env: str = "dev"):
        self._db = db
        self.env = env

    async def create_user(
        self, user_id: UserId, name: str, timestamp: datetime,
    ) -> int:
        stmt = insert(User.__table__).values(
            user_id=user_id, name=name,
            created_at=timestamp, updated_at=timestamp,
        )
        return await self._write(Operation.CREATE_USER, stmt)

    async def add_item_to_user(
        self, user_id: UserId, item_id: ItemId, timestamp: datetime,
    ) -> int:
        stmt = insert(UserItem.__table__).values(
            user_id=user_id, item_id=item_id,
            created_at=timestamp, updated_at=timestamp,
        )
        return await self._write(Operation.ADD_ITEM_TO_USER, stmt)

    async def user_items(self, user_id: UserId) -> list[UserItemRow]:
        op = Operation.USER_ITEMS
        tx_tag = transaction_tag(op, self.env)
        req_tag = request_tag(op, self.env, StatementAction.QUERY)
        stmt = (
            select(User.name, Item.item_name, UserItem.item_id)
            .select_from(UserItem)
            .join(Item, Item.item_id == UserItem.item_id)
            .join(User, User.user_id == UserItem.user_id)
            .where(UserItem.user_id == user_id)
            .prefix_with(sql_comment(req_tag))
        )
        async with self._db.transaction(op.value, tx_tag, read_only=True) as session:
            with span("txnQuery", request_tag=req_tag):
                result = await session.execute(stmt)
            with span("readResults"):
                return [
                    UserItemRow(
                        user_name=row.name,
                        item_name=row.item_name,
                        item_id=row.item_id,
                    )
                    for row in result
                ]

    async def _write(self, op: Operation, stmt: Insert) -> int:
        tx_tag = transaction_tag(op, self.env)
        req_tag = request_tag(op, self.env, StatementAction.INSERT)
        with span("DML in transaction", transaction_tag=tx_tag):
            async with self._db.transaction(op.value, tx_tag) as session:
                with span("UpdateRecord", request_tag=req_tag):
                    result = await session.execute(
                        stmt.prefix_with(sql_comment(req_tag)),
                    )
                    rows = result.rowcount
        logger.info(
            f"Inserted {rows} row(s)",
            extra={"transaction_tag": tx_tag, "rows_affected": rows},
        )
        return rows
