import logging
from typing import Any, Mapping

import jwt

from ...domain.constants import JWT_ALGORITHM
from ...domain.entities import DecodedToken
from ...domain.exceptions import MalformedTokenError
from ...domain.ports import Clock

logger = logging.getLogger(__name__)


class JWTTokenCodec:
    """
    HS256 token codec built on PyJWT.

    Only the single algorithm used for Ably channel tokens is supported.
    """

    # ------------------------------------------------------------------ #
    # Encoding
    # ------------------------------------------------------------------ #

    def encode(self, header: Mapping[str, Any], claims: Mapping[str, Any], secret: str) -> str:
        """
        Sign `claims` with `secret`.

        `header` may carry `typ` and `kid`; its `alg` (if any) must be HS256.
        """
        alg = header.get("alg", JWT_ALGORITHM)
        if alg != JWT_ALGORITHM:
            raise ValueError(f"Unsupported signing algorithm: {alg}")

        extra_headers = {k: v for k, v in header.items() if k != "alg"}
        return jwt.encode(dict(claims), secret, algorithm=JWT_ALGORITHM, headers=extra_headers)

    # ------------------------------------------------------------------ #
    # Decoding
    # ------------------------------------------------------------------ #

    def decode(self, token: str) -> DecodedToken:
        """
        Decode header and claims without verifying the signature.

        Raises:
            MalformedTokenError
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError("Token must have exactly three segments")

        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise MalformedTokenError(f"Undecodable token: {exc}") from exc

        return DecodedToken(header=header, claims=claims)

    def verify(self, token: str, secret: str, clock: Clock) -> bool:
        """
        True if `token` was signed with `secret` and has not expired
        according to `clock`. Never raises.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            return False

        try:
            # Expiry is checked against `clock`, not the local time PyJWT uses
            claims = jwt.decode(
                token,
                secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            logger.debug("Token verification failed: %s", type(exc).__name__)
            return False

        exp = claims.get("exp")
        if not isinstance(exp, int) or isinstance(exp, bool):
            return False

        return clock.now() < exp
