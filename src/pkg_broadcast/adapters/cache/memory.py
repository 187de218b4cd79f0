import threading
import time
from typing import Any, Callable, Dict, Tuple, TypeVar

T = TypeVar("T")


class InMemoryCacheStore:
    """
    Process-local CacheStore.

    Values are read without locking; a miss takes the lock and re-checks
    before calling the factory, so concurrent misses fill the entry once.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _get_fresh(self, key: str) -> Tuple[bool, Any]:
        entry = self._entries.get(key)
        if entry is not None and time.monotonic() < entry[0]:
            return True, entry[1]
        return False, None

    def remember(self, key: str, ttl_seconds: int, factory: Callable[[], T]) -> T:
        hit, value = self._get_fresh(key)
        if hit:
            return value

        with self._lock:
            hit, value = self._get_fresh(key)
            if hit:
                return value

            value = factory()
            self._entries[key] = (time.monotonic() + ttl_seconds, value)
            return value

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
