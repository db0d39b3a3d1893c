"""Route Dependencies — hand the lifespan-built collaborators to route handlers.

Invariants:
    - Collaborators are built once in the lifespan and read from app.state
    - Tests replace them via app.dependency_overrides
"""

from fastapi import Request

from app.infrastructure.database import DatabaseSessionManager
from app.services.user_items import UserItemsService


def get_user_items_service(request: Request) -> UserItemsService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise RuntimeError("Service not initialized")
    return service


def get_db_manager(request: Request) -> DatabaseSessionManager | None:
    return getattr(request.app.state, "db", None)


def get_cache(request: Request):
    return getattr(request.app.state, "cache", None)
