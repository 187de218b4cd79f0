from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

from ...domain.constants import ALL_OPERATIONS
from ...domain.entities import AuthRequest
from ...domain.exceptions import AccessDeniedError
from ...domain.ports import ChannelAuthorizer, UserResolver
from ...domain.value_objects import is_guarded, normalize_operations, strip_class_prefix
from ..channels import request_user
from .issue_token import IssueTokenUseCase

logger = logging.getLogger(__name__)


def principal_id(user: Any) -> Optional[Any]:
    """
    Identifier of a principal, as used for `x-ably-clientId`.

    Prefers `get_auth_identifier_for_broadcasting()`, then
    `get_auth_identifier()`, then an `id` attribute or key.
    """
    if user is None:
        return None
    for accessor in ("get_auth_identifier_for_broadcasting", "get_auth_identifier"):
        method = getattr(user, accessor, None)
        if callable(method):
            return method()
    if isinstance(user, Mapping):
        return user.get("id")
    return getattr(user, "id", None)


def describe(channel: str, connection_id: Optional[str], user_id: Any = None) -> str:
    """Diagnostic context appended to denial messages."""
    message = f"channel-name:{channel} ably-connection-id:{connection_id or ''}"
    if user_id:
        return f"user-id:{user_id} {message}"
    return message


@dataclass(slots=True)
class AuthorizeChannelUseCase:
    """
    Application use case for the channel auth endpoint.

    Takes an AuthRequest and either returns `{"token": ...}` (plus `info`
    when the channel callback returned extra metadata) or raises
    AccessDeniedError.

    Public channels never need a principal. Private and presence channels
    need one, and `authorizer` must grant access to the bare channel name.
    The issued capability is keyed by the full channel name.
    """

    issue_token: IssueTokenUseCase
    authorizer: ChannelAuthorizer
    user_resolver: UserResolver = request_user

    def execute(self, request: AuthRequest) -> Dict[str, Any]:
        """
        Raises:
            AccessDeniedError
        """
        channel = request.channel_name or ""
        connection_id = request.socket_id
        bare_channel = strip_class_prefix(channel)

        user = self.user_resolver(request)
        user_id = principal_id(user)

        capability: Iterable[str] | str = ALL_OPERATIONS
        info: Dict[str, Any] = {}

        if is_guarded(channel):
            if not user:
                logger.info("Unauthenticated request for %s", describe(channel, connection_id))
                raise AccessDeniedError(
                    "User not authenticated", describe(channel, connection_id)
                )

            try:
                result = self.authorizer(request, bare_channel)
            except Exception as exc:
                context = describe(channel, connection_id, user_id)
                logger.info("Channel access denied for %s", context)
                raise AccessDeniedError("Access denied", context) from exc

            if not result:
                context = describe(channel, connection_id, user_id)
                logger.info("Channel access denied for %s", context)
                raise AccessDeniedError("Access denied", context)

            if isinstance(result, Mapping):
                info = dict(result)
                if "capability" in info:
                    try:
                        capability = normalize_operations(info.pop("capability"))
                    except ValueError as exc:
                        context = describe(channel, connection_id, user_id)
                        logger.info("Invalid channel capability for %s", context)
                        raise AccessDeniedError("Access denied", context) from exc

        try:
            signed_token = self.issue_token.execute(
                channel,
                previous_token=request.token,
                client_id=user_id,
                capability=capability,
            )
        except Exception:
            # the cause may carry secret-derived detail; never chain it
            context = describe(channel, connection_id, user_id)
            logger.info("Malformed token presented for %s", context)
            raise AccessDeniedError("malformed token", context) from None

        response: Dict[str, Any] = {"token": signed_token}
        if info:
            response["info"] = info
        return response

    def valid_authentication_response(self, request: AuthRequest, result: Any) -> Any:
        """Hook for adapting a successful auth result; returns it unchanged."""
        return result
