"""
pkg_broadcast

Ably channel token issuance for broadcasting: channel naming, capability
claims, token signing/renewal and channel authorization, independent of
any web framework.
"""

__version__ = "1.0.1"

from .domain.constants import ChannelClass
from .domain.entities import AuthRequest, DecodedToken, OutboundMessage, TokenClaims
from .domain.exceptions import (
    AccessDeniedError,
    BroadcastError,
    MalformedTokenError,
    TransportError,
)
from .domain.value_objects import (
    ApiKey,
    CapabilityClaims,
    ChannelName,
    classify,
    format_channels,
    is_guarded,
    strip_class_prefix,
    to_canonical,
)
from .domain.ports import (
    CacheStore,
    ChannelAuthorizer,
    Clock,
    Publisher,
    TimeSource,
    UserResolver,
)

from .application.channels import ChannelRegistry
from .application.use_cases.issue_token import IssueTokenUseCase
from .application.use_cases.authorize_channel import AuthorizeChannelUseCase
from .application.use_cases.broadcast import BroadcastUseCase

from .adapters.jwt.token_codec import JWTTokenCodec
from .adapters.ably.clock import ServerTimeClock, SystemClock

from .config import BroadcasterSettings, settings_from_env
from .integrations.common.broadcaster_factory import AblyBroadcaster, create_broadcaster

__all__ = [
    "__version__",
    # domain core
    "ChannelClass",
    "ChannelName",
    "CapabilityClaims",
    "ApiKey",
    "AuthRequest",
    "TokenClaims",
    "DecodedToken",
    "OutboundMessage",
    "classify",
    "is_guarded",
    "to_canonical",
    "format_channels",
    "strip_class_prefix",
    # ports
    "Clock",
    "TimeSource",
    "CacheStore",
    "ChannelAuthorizer",
    "UserResolver",
    "Publisher",
    # exceptions
    "AccessDeniedError",
    "MalformedTokenError",
    "TransportError",
    "BroadcastError",
    # use cases
    "ChannelRegistry",
    "IssueTokenUseCase",
    "AuthorizeChannelUseCase",
    "BroadcastUseCase",
    # adapters
    "JWTTokenCodec",
    "ServerTimeClock",
    "SystemClock",
    # wiring
    "BroadcasterSettings",
    "settings_from_env",
    "AblyBroadcaster",
    "create_broadcaster",
]
