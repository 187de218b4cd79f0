from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Pattern, Tuple

from ..domain.entities import AuthRequest
from ..domain.exceptions import AccessDeniedError
from ..domain.ports import UserResolver

logger = logging.getLogger(__name__)

ChannelCallback = Callable[..., Any]

_PLACEHOLDER = re.compile(r"\{(.*?)\}")


def request_user(request: AuthRequest) -> Optional[Any]:
    """Default UserResolver: the principal attached by the HTTP layer."""
    return request.user


def _compile_pattern(pattern: str) -> Tuple[Pattern[str], List[str]]:
    """
    `orders.{order_id}` -> regex matching `orders.42`, params ["order_id"].

    Each placeholder matches a single dot-free segment.
    """
    params: List[str] = []
    parts: List[str] = []
    last = 0
    for match in _PLACEHOLDER.finditer(pattern):
        parts.append(re.escape(pattern[last:match.start()]))
        parts.append(r"([^.]+)")
        params.append(match.group(1))
        last = match.end()
    parts.append(re.escape(pattern[last:]))
    return re.compile("^" + "".join(parts) + "$"), params


@dataclass(slots=True)
class _Route:
    pattern: str
    regex: Pattern[str]
    params: List[str]
    callback: ChannelCallback


@dataclass(slots=True)
class ChannelRegistry:
    """
    Pattern-based channel authorization (a ChannelAuthorizer).

    Register callbacks for bare channel names (no `private:`/`presence:`
    prefix):

        channels = ChannelRegistry()

        @channels.channel("orders.{order_id}")
        def can_view_order(user, order_id):
            return user.owns_order(order_id)

        @channels.channel("chat.{room}")
        def join_chat(user, room):
            return {"id": user.id, "name": user.name, "capability": ["subscribe", "presence"]}

    A callback returning False denies; a truthy value grants and is handed
    back to the caller (mappings become channel metadata). Any other result
    lets later patterns decide. No granting pattern means access denied.
    """

    user_resolver: UserResolver = request_user
    _routes: List[_Route] = field(default_factory=list)

    def channel(self, pattern: str, callback: ChannelCallback | None = None):
        """Register `callback` for `pattern`; usable as a decorator."""

        def register(func: ChannelCallback) -> ChannelCallback:
            regex, params = _compile_pattern(pattern)
            self._routes.append(_Route(pattern, regex, params, func))
            return func

        if callback is not None:
            return register(callback)
        return register

    @property
    def patterns(self) -> List[str]:
        return [route.pattern for route in self._routes]

    def __call__(self, request: AuthRequest, channel: str) -> bool | Mapping[str, Any]:
        user = self.user_resolver(request)

        for route in self._routes:
            match = route.regex.match(channel)
            if not match:
                continue

            params = dict(zip(route.params, match.groups()))
            result = route.callback(user, **params)

            if result is False:
                raise AccessDeniedError(f"Channel callback denied access to {channel!r}")
            if result:
                return result

        logger.debug("No channel callback granted access to %s", channel)
        raise AccessDeniedError(f"No channel callback granted access to {channel!r}")
