class AccessDeniedError(Exception):
    """Raised when a channel token may not be issued for a request."""

    def __init__(self, reason: str, context: str = "") -> None:
        self.reason = reason
        self.context = context
        super().__init__(f"{reason}, {context}" if context else reason)


class MalformedTokenError(Exception):
    """Raised when a token or its capability claim cannot be decoded."""
    pass


class TransportError(Exception):
    """Raised by publishers when the realtime service rejects a message."""
    pass


class BroadcastError(Exception):
    """Raised when broadcasting an event to its channels fails."""
    pass
