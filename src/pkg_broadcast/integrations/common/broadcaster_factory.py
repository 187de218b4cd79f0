from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...adapters.ably.clock import ServerTimeClock
from ...adapters.ably.rest import AblyRestClient
from ...adapters.cache.memory import InMemoryCacheStore
from ...adapters.jwt.token_codec import JWTTokenCodec
from ...application.channels import ChannelCallback, ChannelRegistry, request_user
from ...application.use_cases.authorize_channel import AuthorizeChannelUseCase
from ...application.use_cases.broadcast import BroadcastUseCase
from ...application.use_cases.issue_token import IssueTokenUseCase, default_channel_claims
from ...config.settings import BroadcasterSettings
from ...domain.constants import ALL_OPERATIONS
from ...domain.entities import AuthRequest
from ...domain.ports import CacheStore, ChannelAuthorizer, Clock, Publisher, UserResolver
from ...domain.value_objects import format_channels

# Shared across broadcasters in this process, so the server time offset
# is fetched once per refresh window.
_default_cache = InMemoryCacheStore()


@dataclass(slots=True)
class AblyBroadcaster:
    """
    Framework-agnostic broadcaster facade.

    Integrations (FastAPI, etc.) adapt this to their own routing /
    dependency systems.
    """

    authorize_use_case: AuthorizeChannelUseCase
    broadcast_use_case: BroadcastUseCase
    channels: Optional[ChannelRegistry] = None

    # --- Core operations --------------------------------------------------

    def auth(self, request: AuthRequest) -> Dict[str, Any]:
        """AuthRequest -> {"token": ..., "info"?: ...} (or raise AccessDeniedError)."""
        result = self.authorize_use_case.execute(request)
        return self.valid_authentication_response(request, result)

    def valid_authentication_response(self, request: AuthRequest, result: Any) -> Any:
        return self.authorize_use_case.valid_authentication_response(request, result)

    def broadcast(
            self,
            channels: Iterable[Any],
            event: str,
            payload: Mapping[str, Any] | None = None,
    ) -> None:
        """Publish `event` to every channel (or raise BroadcastError)."""
        self.broadcast_use_case.execute(channels, event, payload)

    def get_signed_token(
            self,
            channel: Optional[str],
            token: Optional[str] = None,
            client_id: Any = None,
            capability: Iterable[str] | str = ALL_OPERATIONS,
    ) -> str:
        return self.authorize_use_case.issue_token.execute(
            channel,
            previous_token=token,
            client_id=client_id,
            capability=capability,
        )

    # --- Convenience helpers ----------------------------------------------

    def channel(self, pattern: str, callback: ChannelCallback | None = None):
        """Register a channel authorization callback (see ChannelRegistry)."""
        if self.channels is None:
            raise RuntimeError("This broadcaster was built with a custom authorizer")
        return self.channels.channel(pattern, callback)

    @staticmethod
    def format_channels(channels: Iterable[Any]) -> List[str]:
        return format_channels(channels)


def create_broadcaster(
        settings: BroadcasterSettings,
        *,
        authorizer: ChannelAuthorizer | None = None,
        user_resolver: UserResolver = request_user,
        clock: Clock | None = None,
        publisher: Publisher | None = None,
        cache: CacheStore | None = None,
) -> AblyBroadcaster:
    """
    High-level factory: BroadcasterSettings -> AblyBroadcaster.

    - builds an AblyRestClient used as time source and publisher
    - wires a server-time corrected clock over a shared cache
    - wires IssueTokenUseCase + AuthorizeChannelUseCase + BroadcastUseCase

    Without an explicit `authorizer`, a ChannelRegistry is created and
    callbacks can be registered with `broadcaster.channel(...)`.
    """
    api_key = settings.api_key
    rest = AblyRestClient(
        api_key,
        rest_host=settings.rest_host,
        timeout=settings.request_timeout,
    )

    if clock is None:
        clock = ServerTimeClock(
            time_source=rest,
            cache=cache or _default_cache,
            ttl_seconds=settings.server_time_ttl,
        )

    registry: Optional[ChannelRegistry] = None
    if authorizer is None:
        registry = ChannelRegistry(user_resolver=user_resolver)
        authorizer = registry

    issue_uc = IssueTokenUseCase(
        api_key=api_key,
        clock=clock,
        codec=JWTTokenCodec(),
        token_expiry=settings.token_expiry,
        default_claims=default_channel_claims(settings.disable_public_channels),
    )
    authorize_uc = AuthorizeChannelUseCase(
        issue_token=issue_uc,
        authorizer=authorizer,
        user_resolver=user_resolver,
    )
    broadcast_uc = BroadcastUseCase(publisher=publisher or rest)

    return AblyBroadcaster(
        authorize_use_case=authorize_uc,
        broadcast_use_case=broadcast_uc,
        channels=registry,
    )
