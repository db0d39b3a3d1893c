"""Cache keys — deterministic key derivation for cached projections."""

USER_ITEMS_PREFIX = "UserItems_"


def user_items_key(user_id: str) -> str:
    return f"{USER_ITEMS_PREFIX}{user_id}"
