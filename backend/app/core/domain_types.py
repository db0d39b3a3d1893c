"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId and ItemId are opaque strings (UUIDv4 for users, seed-assigned for items)
    - All valid modes encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and env vars without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
ItemId = NewType("ItemId", str)


# ─── Enums ───────────────────────────────────────────────────────

class PublishMode(str, Enum):
    """Event delivery mode, fixed per deployment."""
    SYNC = "sync"
    ASYNC = "async"


class Operation(str, Enum):
    """Data access operations — the `func=` part of every transaction tag."""
    CREATE_USER = "CreateUser"
    ADD_ITEM_TO_USER = "AddItemToUser"
    USER_ITEMS = "UserItems"


class StatementAction(str, Enum):
    """Statement kind — the `action=` part of a request tag."""
    INSERT = "insert"
    QUERY = "query"
