# tests/test_clock.py
import threading
import time

import pytest

from pkg_broadcast.adapters.ably.clock import ServerTimeClock, SystemClock
from pkg_broadcast.adapters.cache.memory import InMemoryCacheStore
from pkg_broadcast.domain.exceptions import TransportError


class StubTimeSource:
    def __init__(self, server_ms=None, error=None):
        self.server_ms = server_ms
        self.error = error
        self.calls = 0

    def server_time_ms(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.server_ms


@pytest.fixture
def local_time(monkeypatch):
    monkeypatch.setattr(time, "time", lambda: 1000.0)


def test_system_clock_is_local_time(local_time):
    assert SystemClock().now() == 1000


def test_now_is_corrected_by_server_offset(local_time):
    source = StubTimeSource(server_ms=990_400)
    clock = ServerTimeClock(source, InMemoryCacheStore())

    assert clock.offset() == 10
    assert clock.now() == 990


def test_offset_is_shared_through_the_cache(local_time):
    source = StubTimeSource(server_ms=995_000)
    cache = InMemoryCacheStore()

    first = ServerTimeClock(source, cache)
    second = ServerTimeClock(source, cache)
    assert first.now() == second.now() == 995
    first.now()
    assert source.calls == 1


def test_offset_is_refreshed_after_ttl(local_time, monkeypatch):
    monotonic = [100.0]
    monkeypatch.setattr(time, "monotonic", lambda: monotonic[0])

    source = StubTimeSource(server_ms=995_000)
    clock = ServerTimeClock(source, InMemoryCacheStore(), ttl_seconds=60)
    clock.now()

    monotonic[0] += 59
    clock.now()
    assert source.calls == 1

    monotonic[0] += 2
    clock.now()
    assert source.calls == 2


def test_unreachable_time_source_falls_back_to_local_time(local_time):
    source = StubTimeSource(error=TransportError("connection refused"))
    clock = ServerTimeClock(source, InMemoryCacheStore())

    assert clock.now() == 1000
    assert clock.offset() is None
    # failures are not retried until the retry window passes
    assert source.calls == 1


def test_zero_offset_is_local_time(local_time):
    clock = ServerTimeClock(StubTimeSource(server_ms=1_000_000), InMemoryCacheStore())
    assert clock.now() == 1000


def test_cache_fills_once_under_concurrency():
    cache = InMemoryCacheStore()
    calls = []
    barrier = threading.Barrier(8)
    results = []

    def factory():
        calls.append(1)
        time.sleep(0.05)
        return 42

    def worker():
        barrier.wait()
        results.append(cache.remember("k", 60, factory))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results == [42] * 8
    assert len(calls) == 1


def test_cache_does_not_store_failures():
    cache = InMemoryCacheStore()

    def failing():
        raise TransportError("down")

    with pytest.raises(TransportError):
        cache.remember("k", 60, failing)
    assert cache.remember("k", 60, lambda: 1) == 1

    cache.forget("k")
    assert cache.remember("k", 60, lambda: 2) == 2
