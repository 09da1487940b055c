"""Merge result caches: in-memory and Redis-backed (against a minimal fake client)."""

import asyncio
from typing import Any

from src.bp_merge.domain.cache import InMemoryMergeResultCache
from src.bp_merge.domain.models import FailureDescriptor, MergeResult
from src.bp_merge.infrastructure.redis_cache import RedisMergeResultCache


def _result(artifact: bytes = b"%PDF-merged") -> MergeResult:
    failure = FailureDescriptor(3, "stu-2", "lab.pdf", "k/3.pdf", "COLOR", 2, "PDF has no pages")
    return MergeResult(
        artifact=artifact, success_count=2, total_count=3, failures=[failure], attempted_ids=[1, 2, 3]
    )


class _FakePipeline:
    def __init__(self, store: dict[str, bytes]) -> None:
        self._store = store
        self._queued: list[tuple[str, bytes]] = []

    async def __aenter__(self) -> "_FakePipeline":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    def set(self, key: str, value: bytes) -> None:
        self._queued.append((key, value))

    async def execute(self) -> list[bool]:
        for key, value in self._queued:
            self._store[key] = value
        return [True] * len(self._queued)


class _FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        assert transaction
        return _FakePipeline(self.store)

    async def mget(self, *keys: str) -> list[bytes | None]:
        return [self.store.get(k) for k in keys]

    async def delete(self, *keys: str) -> int:
        return sum(1 for k in keys if self.store.pop(k, None) is not None)


class TestInMemoryCache:
    async def test_put_get_overwrite_clear(self) -> None:
        cache = InMemoryMergeResultCache()
        assert await cache.get("k") is None
        await cache.put("k", _result(b"one"))
        await cache.put("k", _result(b"two"))
        assert (await cache.get("k")).artifact == b"two"
        assert await cache.clear("k") is True
        assert await cache.clear("k") is False
        assert await cache.get("k") is None

    async def test_keys_are_independent(self) -> None:
        cache = InMemoryMergeResultCache()
        await cache.put("a", _result(b"A"))
        await cache.put("b", _result(b"B"))
        await cache.clear("a")
        assert (await cache.get("b")).artifact == b"B"

    async def test_concurrent_writers(self) -> None:
        cache = InMemoryMergeResultCache()
        await asyncio.gather(*(cache.put(f"k{i}", _result(bytes([i]))) for i in range(20)))
        for i in range(20):
            assert (await cache.get(f"k{i}")).artifact == bytes([i])


class TestRedisCache:
    async def test_round_trip_preserves_failures_and_attempted_ids(self) -> None:
        redis = _FakeRedis()
        cache = RedisMergeResultCache(redis=redis)  # type: ignore[arg-type]
        original = _result()

        await cache.put("2025|CS|A|3|B1", original)
        loaded = await cache.get("2025|CS|A|3|B1")

        assert loaded is not None
        assert loaded.artifact == original.artifact
        assert loaded.success_count == 2
        assert loaded.total_count == 3
        assert loaded.failures == original.failures
        assert loaded.attempted_ids == [1, 2, 3]
        assert set(redis.store) == {
            "bp:merge:2025|CS|A|3|B1:artifact",
            "bp:merge:2025|CS|A|3|B1:meta",
        }

    async def test_missing_key(self) -> None:
        cache = RedisMergeResultCache(redis=_FakeRedis())  # type: ignore[arg-type]
        assert await cache.get("nope") is None

    async def test_clear(self) -> None:
        redis = _FakeRedis()
        cache = RedisMergeResultCache(redis=redis)  # type: ignore[arg-type]
        await cache.put("k", _result())
        assert await cache.clear("k") is True
        assert redis.store == {}
        assert await cache.clear("k") is False
