from __future__ import annotations

import os

from ..adapters.ably.rest import DEFAULT_REST_HOST
from ..domain.constants import DEFAULT_TOKEN_EXPIRY
from .settings import BroadcasterSettings


def settings_from_env() -> BroadcasterSettings:
    def _bool(key: str, default: bool = False) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    def _int(key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{key} must be an integer, got {raw!r}") from exc

    key = os.getenv("ABLY_KEY")
    if not key:
        raise RuntimeError("Missing broadcaster settings: ABLY_KEY")

    return BroadcasterSettings(
        key=key,
        disable_public_channels=_bool("ABLY_DISABLE_PUBLIC_CHANNELS", False),
        token_expiry=_int("ABLY_TOKEN_EXPIRY", DEFAULT_TOKEN_EXPIRY),
        rest_host=os.getenv("ABLY_REST_HOST") or DEFAULT_REST_HOST,
    )
