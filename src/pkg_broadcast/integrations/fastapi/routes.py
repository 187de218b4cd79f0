from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from ...domain.entities import AuthRequest
from ...domain.exceptions import AccessDeniedError
from ..common.broadcaster_factory import AblyBroadcaster

DEFAULT_AUTH_PATH = "/broadcasting/auth"


async def anonymous_user() -> None:
    """Default user dependency: every request is unauthenticated."""
    return None


async def read_auth_body(request: Request) -> Mapping[str, Any]:
    """
    Auth fields arrive either as JSON or as a form post
    (`channel_name`, `socket_id`, `token`).
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body is not valid JSON",
            ) from exc
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return dict(form)


def build_auth_request(body: Mapping[str, Any], user: Any = None, raw: Any = None) -> AuthRequest:
    token = body.get("token")
    socket_id = body.get("socket_id")
    return AuthRequest(
        channel_name=str(body.get("channel_name") or ""),
        token=str(token) if token else None,
        socket_id=str(socket_id) if socket_id is not None else None,
        user=user,
        raw=raw,
    )


def create_broadcast_router(
    broadcaster: AblyBroadcaster,
    *,
    user_dependency: Optional[Callable[..., Any]] = None,
    path: str = DEFAULT_AUTH_PATH,
) -> APIRouter:
    """
    Router exposing the channel auth endpoint used by realtime clients.

    `user_dependency` is any FastAPI dependency returning the current
    principal or None, e.g. `fastapi_auth.get_optional_user`.

        router = create_broadcast_router(broadcaster, user_dependency=get_optional_user)
        app.include_router(router)

    Denials are returned as 403 with the diagnostic message.
    """
    router = APIRouter()
    get_user = user_dependency or anonymous_user

    @router.post(path)
    async def broadcasting_auth(
        request: Request,
        user: Any = Depends(get_user),
    ) -> Dict[str, Any]:
        body = await read_auth_body(request)
        auth_request = build_auth_request(body, user=user, raw=request)
        try:
            # channel callbacks are sync and may do I/O
            return await run_in_threadpool(broadcaster.auth, auth_request)
        except AccessDeniedError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(exc),
            ) from exc

    return router
