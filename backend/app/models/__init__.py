"""ORM Models — SQLAlchemy declarative models for users, items, and ownership.

Invariants:
    - All models inherit from Base (db/base.py)
    - The store is the source of truth; cached projections are rebuilt from these tables

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.item import Item  # noqa: F401
from app.models.user_item import UserItem  # noqa: F401
