from __future__ import annotations

from dataclasses import dataclass

from ..adapters.ably.rest import DEFAULT_REST_HOST
from ..domain.constants import DEFAULT_TOKEN_EXPIRY, SERVER_TIME_TTL
from ..domain.value_objects import ApiKey


@dataclass(slots=True, repr=False)
class BroadcasterSettings:
    """
    Broadcaster configuration.

    Host code decides how to construct this (env, config file, etc.).
    """
    key: str
    disable_public_channels: bool = False
    token_expiry: int = DEFAULT_TOKEN_EXPIRY
    rest_host: str = DEFAULT_REST_HOST
    server_time_ttl: int = SERVER_TIME_TTL
    request_timeout: float = 10.0

    @property
    def api_key(self) -> ApiKey:
        return ApiKey(self.key)

    def __repr__(self) -> str:
        return (
            f"BroadcasterSettings(key_name={self.api_key.name!r}, "
            f"disable_public_channels={self.disable_public_channels}, "
            f"token_expiry={self.token_expiry}, rest_host={self.rest_host!r})"
        )
