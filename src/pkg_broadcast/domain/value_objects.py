# src/pkg_broadcast/domain/value_objects.py

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .constants import (
    ChannelClass,
    LEGACY_PRESENCE_PREFIX,
    LEGACY_PRIVATE_PREFIX,
    PRESENCE_PREFIX,
    PRIVATE_PREFIX,
    PUBLIC_PREFIX,
)
from .exceptions import MalformedTokenError


# --- Channel naming ------------------------------------------------------


def classify(channel: str) -> ChannelClass:
    """Class of a canonical (colon form) channel identifier."""
    if channel.startswith(PRIVATE_PREFIX):
        return ChannelClass.PRIVATE
    if channel.startswith(PRESENCE_PREFIX):
        return ChannelClass.PRESENCE
    return ChannelClass.PUBLIC


def is_guarded(channel: str) -> bool:
    return classify(channel) is not ChannelClass.PUBLIC


def to_canonical(channel: Any) -> str:
    """
    Map a broadcast target onto its canonical form.

        private-orders  -> private:orders
        presence-lobby  -> presence:lobby
        news            -> public:news

    Already canonical names are returned unchanged.
    """
    channel = str(channel)
    if channel.startswith((PRIVATE_PREFIX, PRESENCE_PREFIX, PUBLIC_PREFIX)):
        return channel
    if channel.startswith(LEGACY_PRIVATE_PREFIX):
        return PRIVATE_PREFIX + channel[len(LEGACY_PRIVATE_PREFIX):]
    if channel.startswith(LEGACY_PRESENCE_PREFIX):
        return PRESENCE_PREFIX + channel[len(LEGACY_PRESENCE_PREFIX):]
    return PUBLIC_PREFIX + channel


def format_channels(channels: Iterable[Any]) -> List[str]:
    return [to_canonical(channel) for channel in channels]


def strip_class_prefix(channel: Optional[str]) -> Optional[str]:
    """
    Bare channel name, as handed to channel authorization callbacks.

    Removes the first occurrence of the class prefix (`public:` for any
    channel that is not private or presence). Empty or None input is
    returned unchanged.
    """
    if not channel:
        return channel
    if channel.startswith(PRIVATE_PREFIX):
        return channel.replace(PRIVATE_PREFIX, "", 1)
    if channel.startswith(PRESENCE_PREFIX):
        return channel.replace(PRESENCE_PREFIX, "", 1)
    return channel.replace(PUBLIC_PREFIX, "", 1)


@dataclass(frozen=True, slots=True)
class ChannelName:
    """
    A canonical channel identifier (``private:orders``, ``public:news``...).
    """
    value: str

    @classmethod
    def from_wire(cls, channel: Any) -> "ChannelName":
        return cls(to_canonical(channel))

    @property
    def channel_class(self) -> ChannelClass:
        return classify(self.value)

    @property
    def is_guarded(self) -> bool:
        return is_guarded(self.value)

    @property
    def bare(self) -> str:
        return strip_class_prefix(self.value) or ""

    def __str__(self) -> str:
        return self.value


# --- Credentials ---------------------------------------------------------


@dataclass(frozen=True, slots=True, repr=False)
class ApiKey:
    """
    Compound Ably API key: ``<app-id>.<key-id>:<secret>``.

    The part before the first ``:`` is public and goes into the token
    header as ``kid``; the rest is the HMAC signing secret.
    """
    value: str

    def __post_init__(self) -> None:
        if ":" not in self.value:
            raise ValueError("Invalid API key: expected '<key-name>:<secret>'")

    @property
    def name(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def secret(self) -> str:
        return self.value.split(":", 1)[1]

    def __repr__(self) -> str:
        return f"ApiKey(name={self.name!r})"


# --- Capability claims ---------------------------------------------------


def normalize_operations(operations: Iterable[str] | str) -> Tuple[str, ...]:
    """
    Normalize operations into a de-duplicated tuple, keeping first-seen order.
    A plain string is treated as a single operation.

    Raises:
        ValueError if `operations` is not a string or an iterable of strings.
    """
    if isinstance(operations, str):
        operations = (operations,)
    try:
        items = list(operations)
    except TypeError as exc:
        raise ValueError(f"Invalid capability operations: {operations!r}") from exc

    result: List[str] = []
    for op in items:
        if not isinstance(op, str):
            raise ValueError(f"Invalid capability operation: {op!r}")
        if op not in result:
            result.append(op)
    return tuple(result)


class CapabilityClaims(Mapping):
    """
    Immutable mapping of channel pattern -> allowed operations.

    Iteration and serialization use sorted keys so the same claims always
    produce the same ``x-ably-capability`` string.
    """

    __slots__ = ("_claims",)

    def __init__(self, claims: Mapping[str, Iterable[str]] | None = None) -> None:
        normalized: Dict[str, Tuple[str, ...]] = {}
        for channel, operations in (claims or {}).items():
            if not isinstance(channel, str):
                raise ValueError(f"Invalid capability channel: {channel!r}")
            normalized[channel] = normalize_operations(operations)
        self._claims = dict(sorted(normalized.items()))

    def __getitem__(self, channel: str) -> Tuple[str, ...]:
        return self._claims[channel]

    def __iter__(self) -> Iterator[str]:
        return iter(self._claims)

    def __len__(self) -> int:
        return len(self._claims)

    def __repr__(self) -> str:
        return f"CapabilityClaims({self.to_dict()!r})"

    def with_channel(
            self,
            channel: str,
            operations: Iterable[str] | str,
    ) -> "CapabilityClaims":
        """Copy with `channel` set to `operations`, replacing any prior entry."""
        merged: Dict[str, Iterable[str]] = dict(self._claims)
        merged[channel] = operations
        return CapabilityClaims(merged)

    def to_dict(self) -> Dict[str, List[str]]:
        return {channel: list(ops) for channel, ops in self._claims.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: Any) -> "CapabilityClaims":
        """
        Parse a serialized capability claim.

        Raises:
            MalformedTokenError if `raw` is not a JSON object of
            channel -> list of operations.
        """
        if not isinstance(raw, str):
            raise MalformedTokenError("Capability claim is missing or not a string")
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise MalformedTokenError("Capability claim is not valid JSON") from exc

        if not isinstance(data, dict):
            raise MalformedTokenError("Capability claim is not a JSON object")
        if not all(isinstance(ops, (list, str)) for ops in data.values()):
            raise MalformedTokenError("Capability operations must be lists")

        try:
            return cls(data)
        except ValueError as exc:
            raise MalformedTokenError(str(exc)) from exc
