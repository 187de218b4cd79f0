from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import APIRouter

from ...config.settings import BroadcasterSettings
from ..common.broadcaster_factory import AblyBroadcaster, create_broadcaster
from .routes import DEFAULT_AUTH_PATH, create_broadcast_router


def create_fastapi_broadcasting(
    settings: BroadcasterSettings,
    *,
    user_dependency: Optional[Callable[..., Any]] = None,
    path: str = DEFAULT_AUTH_PATH,
) -> tuple[AblyBroadcaster, APIRouter]:
    """
    High-level helper for FastAPI apps:

    - Creates an AblyBroadcaster from settings
    - Builds the auth router for it

        broadcaster, router = create_fastapi_broadcasting(settings_from_env())

        @broadcaster.channel("orders.{order_id}")
        def can_view_order(user, order_id):
            ...

        app.include_router(router)

    The broadcaster resolves users from `AuthRequest.user`, which the
    router fills from `user_dependency`.
    """
    broadcaster = create_broadcaster(settings)
    router = create_broadcast_router(
        broadcaster,
        user_dependency=user_dependency,
        path=path,
    )
    return broadcaster, router


__all__ = ["create_broadcast_router", "create_fastapi_broadcasting", "DEFAULT_AUTH_PATH"]
