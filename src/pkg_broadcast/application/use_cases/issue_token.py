from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ...adapters.jwt.token_codec import JWTTokenCodec
from ...domain.constants import (
    ALL_OPERATIONS,
    DEFAULT_PUBLIC_CAPABILITY,
    DEFAULT_TOKEN_EXPIRY,
    JWT_ALGORITHM,
    JWT_TYPE,
    PUBLIC_PREFIX,
    RESTRICTED_PUBLIC_CAPABILITY,
)
from ...domain.entities import TokenClaims
from ...domain.ports import Clock
from ...domain.value_objects import ApiKey, CapabilityClaims

logger = logging.getLogger(__name__)


def default_channel_claims(disable_public_channels: bool = False) -> CapabilityClaims:
    """
    Capabilities every token starts with: all public channels may be
    subscribed to and their history read, unless public channels are
    disabled, in which case only channel metadata is readable.
    """
    operations = RESTRICTED_PUBLIC_CAPABILITY if disable_public_channels else DEFAULT_PUBLIC_CAPABILITY
    return CapabilityClaims({PUBLIC_PREFIX + "*": operations})


@dataclass(slots=True)
class IssueTokenUseCase:
    """
    Application use case:
    - Build the claim set for a channel token (fresh or renewed)
    - Sign it with the API key secret

    Renewal: when `previous_token` is a valid, unexpired token signed with
    the same key, its `iat`/`exp` and capabilities are carried over and only
    the requested channel's capability is replaced. Otherwise a fresh token
    with the default capabilities and a new expiry window is issued.
    """

    api_key: ApiKey
    clock: Clock
    codec: JWTTokenCodec = field(default_factory=JWTTokenCodec)
    token_expiry: int = DEFAULT_TOKEN_EXPIRY
    default_claims: CapabilityClaims = field(default_factory=default_channel_claims)

    def header(self) -> dict[str, str]:
        return {"typ": JWT_TYPE, "alg": JWT_ALGORITHM, "kid": self.api_key.name}

    def resolve_claims(
            self,
            channel: Optional[str],
            previous_token: Optional[str] = None,
            client_id: Any = None,
            capability: Iterable[str] | str = ALL_OPERATIONS,
    ) -> TokenClaims:
        """
        Compute the claims for a new token.

        Raises:
            MalformedTokenError if a verified previous token carries an
            unreadable capability claim.
        """
        if previous_token and self.codec.verify(previous_token, self.api_key.secret, self.clock):
            previous = TokenClaims.from_payload(self.codec.decode(previous_token).claims)
            issued_at = previous.issued_at
            expires_at = previous.expires_at
            channel_claims = previous.capability
            logger.debug("Renewing token issued at %s", issued_at)
        else:
            issued_at = self.clock.now()
            expires_at = issued_at + self.token_expiry
            channel_claims = self.default_claims

        if channel:
            channel_claims = channel_claims.with_channel(channel, capability)

        return TokenClaims(
            issued_at=issued_at,
            expires_at=expires_at,
            capability=channel_claims,
            client_id=str(client_id) if client_id else None,
        )

    def execute(
            self,
            channel: Optional[str],
            previous_token: Optional[str] = None,
            client_id: Any = None,
            capability: Iterable[str] | str = ALL_OPERATIONS,
    ) -> str:
        """Return a signed token granting `capability` on `channel`."""
        claims = self.resolve_claims(channel, previous_token, client_id, capability)
        return self.codec.encode(self.header(), claims.to_payload(), self.api_key.secret)
