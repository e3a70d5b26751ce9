from __future__ import annotations

from core import FetchResult
from storage import MemoryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = MemoryCache(ttl=10, clock=clock)
    result = FetchResult.success([], updated_at=1)

    entry = cache.set("hot", result)
    assert entry.expires_at == 110.0
    assert cache.get("hot").result is result

    clock.now = 110.0
    assert cache.get("hot") is None
    assert cache.size() == 0


def test_per_entry_ttl_and_eviction_of_oldest() -> None:
    clock = FakeClock()
    cache = MemoryCache(ttl=10, max_size=2, clock=clock)

    cache.set("a", FetchResult.success([], updated_at=1), ttl=1000)
    clock.now += 1
    cache.set("b", FetchResult.success([], updated_at=2))
    clock.now += 1
    cache.set("c", FetchResult.success([], updated_at=3))

    assert not cache.exists("a")
    assert cache.exists("b")
    assert cache.exists("c")
