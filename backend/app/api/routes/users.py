"""User Routes — thin HTTP front end over UserItemsService.

Invariants:
    - Routes contain no business logic: parse path, call the service, render JSON
    - Path parameters are limited to [a-z0-9.-]+
    - Domain errors are rendered by the global handlers (api/error_handlers.py)
"""

import logging

from fastapi import APIRouter, Depends, Path

from app.api.dependencies import get_user_items_service
from app.schemas.user import UserCreated, UserItemRow
from app.services.user_items import UserItemsService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["users"])

PATH_PARAM_PATTERN = r"^[a-z0-9.-]+$"


@router.get("/user_id/{user_id}", response_model=list[UserItemRow])
async def get_user_items(
    user_id: str = Path(pattern=PATH_PARAM_PATTERN),
    service: UserItemsService = Depends(get_user_items_service),
):
    """Items the user owns (may lag a recent write by up to the cache TTL)."""
    return await service.user_items(user_id)


@router.post("/user/{user_name}", response_model=UserCreated)
async def create_user(
    user_name: str = Path(pattern=PATH_PARAM_PATTERN),
    service: UserItemsService = Depends(get_user_items_service),
):
    """Create a user with a server-generated id."""
    return await service.create_user(user_name)


@router.put("/user_id/{user_id}/{item_id}")
async def add_item_to_user(
    user_id: str = Path(pattern=PATH_PARAM_PATTERN),
    item_id: str = Path(pattern=PATH_PARAM_PATTERN),
    service: UserItemsService = Depends(get_user_items_service),
):
    await service.add_item_to_user(user_id, item_id)
    return {}
