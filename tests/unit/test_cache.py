from datetime import timedelta

import pytest

from conftest import FakeClock
from pr_report.agent.schema import ReportSchema
from pr_report.cache.decorator import CACHE_VERSION, cached, hash_text
from pr_report.cache.store import InMemoryKeyValueStore, SqliteKeyValueStore
from pr_report.errors import CacheWriteFailure

TTL = timedelta(minutes=1)


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self, owner: str, number: int) -> dict[str, int]:
        self.calls += 1
        return {"number": number, "call": self.calls}


class _FailingWriteStore(InMemoryKeyValueStore):
    async def set(self, key, value) -> None:
        raise CacheWriteFailure("disk full")


def _key(owner: str, number: int) -> tuple[str, str, int]:
    return ("lookup", owner, number)


@pytest.mark.asyncio
async def test_second_call_within_ttl_is_served_from_cache() -> None:
    fn = _Counter()
    store = InMemoryKeyValueStore()
    lookup = cached(fn, _key, TTL, store=store, result_type=dict[str, int], clock=FakeClock())

    first = await lookup("acme", 42)
    second = await lookup("acme", 42)

    assert fn.calls == 1
    assert first == second == {"number": 42, "call": 1}
    assert await store.get((CACHE_VERSION, "lookup", "acme", "42")) is not None


@pytest.mark.asyncio
async def test_distinct_keys_are_computed_separately() -> None:
    fn = _Counter()
    lookup = cached(fn, _key, TTL, store=InMemoryKeyValueStore(), result_type=dict[str, int])

    await lookup("acme", 1)
    await lookup("acme", 2)

    assert fn.calls == 2


@pytest.mark.asyncio
async def test_entry_is_a_hit_just_before_ttl() -> None:
    fn = _Counter()
    clock = FakeClock()
    lookup = cached(fn, _key, TTL, store=InMemoryKeyValueStore(), result_type=dict[str, int], clock=clock)

    await lookup("acme", 42)
    clock.advance(TTL - timedelta(seconds=1))
    await lookup("acme", 42)

    assert fn.calls == 1


@pytest.mark.asyncio
async def test_entry_is_a_miss_after_ttl() -> None:
    fn = _Counter()
    clock = FakeClock()
    lookup = cached(fn, _key, TTL, store=InMemoryKeyValueStore(), result_type=dict[str, int], clock=clock)

    await lookup("acme", 42)
    clock.advance(TTL + timedelta(seconds=1))
    refreshed = await lookup("acme", 42)

    assert fn.calls == 2
    assert refreshed == {"number": 42, "call": 2}


@pytest.mark.asyncio
async def test_entry_exactly_ttl_old_is_stale() -> None:
    fn = _Counter()
    clock = FakeClock()
    lookup = cached(fn, _key, TTL, store=InMemoryKeyValueStore(), result_type=dict[str, int], clock=clock)

    await lookup("acme", 42)
    clock.advance(TTL)
    await lookup("acme", 42)

    assert fn.calls == 2


@pytest.mark.asyncio
async def test_version_bump_ignores_older_entries() -> None:
    fn = _Counter()
    store = InMemoryKeyValueStore()
    old = cached(fn, _key, TTL, store=store, result_type=dict[str, int], version="v1")
    new = cached(fn, _key, TTL, store=store, result_type=dict[str, int], version="v3")

    await old("acme", 42)
    await new("acme", 42)

    assert fn.calls == 2
    assert len(store) == 2


@pytest.mark.asyncio
async def test_write_failure_does_not_fail_the_call() -> None:
    fn = _Counter()
    lookup = cached(fn, _key, TTL, store=_FailingWriteStore(), result_type=dict[str, int])

    assert await lookup("acme", 42) == {"number": 42, "call": 1}
    assert await lookup("acme", 42) == {"number": 42, "call": 2}


@pytest.mark.asyncio
async def test_undecodable_entry_is_recomputed() -> None:
    fn = _Counter()
    store = InMemoryKeyValueStore()
    await store.set((CACHE_VERSION, "lookup", "acme", "42"), '{"not": "an entry"}')
    lookup = cached(fn, _key, TTL, store=store, result_type=dict[str, int])

    assert await lookup("acme", 42) == {"number": 42, "call": 1}


@pytest.mark.asyncio
async def test_async_key_deriver_and_model_results(report_args) -> None:
    calls = []

    async def generate(payload: str) -> ReportSchema:
        calls.append(payload)
        return ReportSchema.model_validate(report_args)

    async def key_for(payload: str) -> tuple[str, str]:
        return ("generate", hash_text(payload))

    cached_generate = cached(
        generate, key_for, timedelta(days=1), store=InMemoryKeyValueStore(), result_type=ReportSchema
    )

    first = await cached_generate("payload")
    second = await cached_generate("payload")

    assert calls == ["payload"]
    assert isinstance(second, ReportSchema)
    assert second == first
    assert cached_generate.__name__ == "generate"


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_decorators(tmp_path) -> None:
    path = tmp_path / "cache.db"
    fn = _Counter()

    first = cached(fn, _key, TTL, store=SqliteKeyValueStore(path), result_type=dict[str, int])
    await first("acme", 42)

    second = cached(fn, _key, TTL, store=SqliteKeyValueStore(path), result_type=dict[str, int])
    assert await second("acme", 42) == {"number": 42, "call": 1}
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_sqlite_store_last_write_wins(tmp_path) -> None:
    store = SqliteKeyValueStore(tmp_path / "cache.db")
    key = (CACHE_VERSION, "lookup", "acme", "42")

    assert await store.get(key) is None
    await store.set(key, "first")
    await store.set(key, "second")

    assert await store.get(key) == "second"
    assert await store.get((CACHE_VERSION, "lookup", "acme", "43")) is None


def test_hash_text_is_sha256_hex() -> None:
    assert hash_text("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
