"""Parameter Validator — structural checks on operation inputs before any transaction opens.

Invariants:
    - Pure check: no IO, no mutation, same answer for the same input
    - Every violated constraint is reported, not only the first
    - Built once at startup from settings and passed explicitly to the service

Design Decisions:
    - Constrained Pydantic models generated per ruleset with create_model: the limits
      come from configuration, the field names and shapes from schemas/user.py
"""

from typing import Annotated, Any

from pydantic import BaseModel, StringConstraints, ValidationError, create_model

from app.core.errors import InputValidationError, ErrorContext
from app.schemas.user import UserParams, ItemParams

DEFAULT_MAX_ID_LENGTH = 36
DEFAULT_MAX_NAME_LENGTH = 64


class ParamValidator:
    """Ruleset for user and item parameters (presence + maximum length)."""

    def __init__(
        self,
        max_id_length: int = DEFAULT_MAX_ID_LENGTH,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ):
        self.max_id_length = max_id_length
        self.max_name_length = max_name_length
        identifier = Annotated[
            str, StringConstraints(min_length=1, max_length=max_id_length),
        ]
        name = Annotated[
            str, StringConstraints(min_length=1, max_length=max_name_length),
        ]
        self._user = create_model(
            "CheckedUserParams", __base__=UserParams,
            user_id=(identifier, ...),
        )
        self._new_user = create_model(
            "CheckedNewUserParams", __base__=UserParams,
            user_id=(identifier, ...), user_name=(name, ...),
        )
        self._item = create_model(
            "CheckedItemParams", __base__=ItemParams,
            item_id=(identifier, ...),
        )

    def check_new_user(self, user_id: Any, user_name: Any) -> UserParams:
        params, violations = _run(
            self._new_user, user_id=user_id, user_name=user_name,
        )
        _raise_if_any(violations, user_id=user_id)
        return params

    def check_user_item(
        self, user_id: Any, item_id: Any,
    ) -> tuple[UserParams, ItemParams]:
        user, user_violations = _run(self._user, user_id=user_id)
        item, item_violations = _run(self._item, item_id=item_id)
        _raise_if_any(
            user_violations + item_violations,
            user_id=user_id, item_id=item_id,
        )
        return user, item


def _run(model: type[BaseModel], **fields: Any) -> tuple[Any, list[dict]]:
    try:
        return model(**fields), []
    except ValidationError as e:
        return None, [
            {
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]


def _raise_if_any(
    violations: list[dict], user_id: Any = None, item_id: Any = None,
) -> None:
    if not violations:
        return
    raise InputValidationError(
        violations,
        ErrorContext(
            user_id=user_id if isinstance(user_id, str) else None,
            item_id=item_id if isinstance(item_id, str) else None,
        ),
    )
