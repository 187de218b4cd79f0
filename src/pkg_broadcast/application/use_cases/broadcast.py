from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ...domain.entities import OutboundMessage
from ...domain.exceptions import BroadcastError, TransportError
from ...domain.ports import Publisher
from ...domain.value_objects import format_channels

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BroadcastUseCase:
    """
    Application use case:
    - Normalize broadcast targets to canonical channel names
    - Publish one message envelope per channel, in order

    The first failed publish aborts the remaining channels.
    """

    publisher: Publisher

    def execute(
            self,
            channels: Iterable[Any],
            event: str,
            payload: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Raises:
            BroadcastError
        """
        message = OutboundMessage.build(event, payload)
        try:
            for channel in format_channels(channels):
                self.publisher.publish(channel, message)
                logger.debug("Published %s to %s", event, channel)
        except TransportError as exc:
            raise BroadcastError(f"Ably error: {exc}") from exc
