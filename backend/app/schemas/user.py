"""User Schemas — Pydantic models for operation parameters, rows, and API responses.

Invariants:
    - UserItemRow is the single shape of a (user_name, item_name, item_id) row,
      used for the store result, the cache payload, and the HTTP response
    - Parameter constraints live in the validator ruleset, not on these models

Design Decisions:
    - Params are plain models: lengths are configurable, so the validator builds
      the constrained variants once at startup (see core/validation.py)
"""

from pydantic import BaseModel, TypeAdapter


class UserParams(BaseModel):
    """Parameters identifying a user (and the name, on creation)."""
    user_id: str
    user_name: str | None = None


class ItemParams(BaseModel):
    """Parameters identifying an item."""
    item_id: str


class UserItemRow(BaseModel):
    """One row of the users ⨝ user_items ⨝ items projection."""
    user_name: str
    item_name: str
    item_id: str


class UserCreated(BaseModel):
    """Response of user creation."""
    id: str
    name: str


UserItemRows = TypeAdapter(list[UserItemRow])
