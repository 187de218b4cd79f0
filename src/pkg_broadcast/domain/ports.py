from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

from .entities import AuthRequest, OutboundMessage

T = TypeVar("T")


class Clock(Protocol):
    """
    Port for the current time, in whole epoch seconds.
    """

    def now(self) -> int:
        ...


class TimeSource(Protocol):
    """
    Port for an authoritative time source (e.g. Ably's `/time` endpoint).
    """

    def server_time_ms(self) -> int:
        """
        Return the server time in milliseconds.

        Raises:
          - TransportError if the source cannot be reached
        """
        ...


class CacheStore(Protocol):
    """
    Port for a shared key/value cache.
    """

    def remember(self, key: str, ttl_seconds: int, factory: Callable[[], T]) -> T:
        """
        Return the cached value for `key`, computing and storing it with
        `factory` when missing or expired.

        Concurrent callers for the same key must not run `factory` twice.
        """
        ...


class ChannelAuthorizer(Protocol):
    """
    Port for the host application's channel authorization callback.

    Receives the bare channel name (class prefix removed). Returns a truthy
    value or a metadata mapping to grant access; raises (or returns a falsy
    value) to deny. A `capability` key in the mapping overrides the
    operations granted on the channel.
    """

    def __call__(self, request: AuthRequest, channel: str) -> bool | Mapping[str, Any]:
        ...


class UserResolver(Protocol):
    """
    Port for looking up the authenticated principal of a request.
    """

    def __call__(self, request: AuthRequest) -> Optional[Any]:
        ...


class Publisher(Protocol):
    """
    Port for publishing a message to one canonical channel.
    """

    def publish(self, channel: str, message: OutboundMessage) -> None:
        """
        Raises:
          - TransportError if the message was not accepted
        """
        ...
