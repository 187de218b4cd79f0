from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .constants import CLAIM_CAPABILITY, CLAIM_CLIENT_ID
from .exceptions import MalformedTokenError
from .value_objects import CapabilityClaims


@dataclass(frozen=True, slots=True)
class AuthRequest:
    """
    Channel auth request as sent by a realtime client.

    `user` is the principal already resolved by the HTTP layer (if any);
    `raw` is the framework request, passed through untouched.
    """
    channel_name: str = ""
    token: Optional[str] = None
    socket_id: Optional[str] = None
    user: Any = None
    raw: Any = None


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Claim set of an issued channel token.
    """
    issued_at: int
    expires_at: int
    capability: CapabilityClaims = field(default_factory=CapabilityClaims)
    client_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "iat": self.issued_at,
            "exp": self.expires_at,
            CLAIM_CLIENT_ID: self.client_id,
            CLAIM_CAPABILITY: self.capability.to_json(),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TokenClaims":
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not isinstance(iat, int) or not isinstance(exp, int):
            raise MalformedTokenError("Token is missing integer 'iat'/'exp' claims")

        client_id = payload.get(CLAIM_CLIENT_ID)
        return cls(
            issued_at=iat,
            expires_at=exp,
            capability=CapabilityClaims.from_json(payload.get(CLAIM_CAPABILITY)),
            client_id=str(client_id) if client_id is not None else None,
        )


@dataclass(frozen=True, slots=True)
class DecodedToken:
    """
    Unverified header and claims of a token.
    """
    header: Mapping[str, Any]
    claims: Mapping[str, Any]

    @property
    def key_id(self) -> Optional[str]:
        return self.header.get("kid")


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """
    Message envelope published to a channel.

    `connection_key` lets the realtime service skip echoing the event back
    to the connection that triggered it.
    """
    name: str
    data: Any = None
    connection_key: Optional[str] = None

    @classmethod
    def build(cls, event: str, payload: Mapping[str, Any] | None = None) -> "OutboundMessage":
        payload = payload if payload is not None else {}
        return cls(
            name=event,
            data=payload,
            connection_key=payload.get("socket"),
        )

    def to_dict(self) -> Dict[str, Any]:
        message: Dict[str, Any] = {"name": self.name, "data": self.data}
        if self.connection_key is not None:
            message["connectionKey"] = self.connection_key
        return message
