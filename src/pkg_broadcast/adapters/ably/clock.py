import logging
import time
from typing import Optional

from ...domain.constants import SERVER_TIME_CACHE_KEY, SERVER_TIME_TTL
from ...domain.exceptions import TransportError
from ...domain.ports import CacheStore, TimeSource

logger = logging.getLogger(__name__)


class SystemClock:
    """Local wall-clock time."""

    def now(self) -> int:
        return int(time.time())


class ServerTimeClock:
    """
    Clock corrected against the realtime service's server time.

    The offset (local - server, in seconds) lives in a shared CacheStore
    for `ttl_seconds`, so all clocks sharing the store query the time
    source at most once per window. When the source is unreachable the
    clock falls back to local time and does not retry for
    `retry_after_seconds`.
    """

    def __init__(
        self,
        time_source: TimeSource,
        cache: CacheStore,
        ttl_seconds: int = SERVER_TIME_TTL,
        retry_after_seconds: int = 60,
    ) -> None:
        self._time_source = time_source
        self._cache = cache
        self._ttl = ttl_seconds
        self._retry_after = retry_after_seconds
        self._failed_until: float = 0.0

    def now(self) -> int:
        local = int(time.time())
        offset = self.offset()
        if offset:
            return local - offset
        return local

    def offset(self) -> Optional[int]:
        if time.monotonic() < self._failed_until:
            return None

        try:
            return self._cache.remember(SERVER_TIME_CACHE_KEY, self._ttl, self._compute_offset)
        except TransportError as exc:
            logger.warning("Server time unavailable, using local clock: %s", exc)
            self._failed_until = time.monotonic() + self._retry_after
            return None

    def _compute_offset(self) -> int:
        server_seconds = round(self._time_source.server_time_ms() / 1000)
        offset = int(time.time()) - server_seconds
        logger.debug("Server time offset refreshed: %ss", offset)
        return offset
