"""RedisMergeResultCache — merge results shared across API workers.

Each key maps to two Redis strings written in one MULTI/EXEC pipeline:
  bp:merge:{key}:artifact  raw PDF bytes
  bp:merge:{key}:meta      JSON {success_count, total_count, failures, attempted_ids}
"""

import json
import logging

import redis.asyncio as aioredis

from src.bp_common.redis_client import get_redis
from src.bp_merge.domain.models import FailureDescriptor, MergeResult

logger = logging.getLogger(__name__)

_PREFIX = "bp:merge:"


def _keys(key: str) -> tuple[str, str]:
    return f"{_PREFIX}{key}:artifact", f"{_PREFIX}{key}:meta"


class RedisMergeResultCache:
    def __init__(self, redis: aioredis.Redis | None = None) -> None:
        self._redis = redis

    async def _client(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    async def put(self, key: str, result: MergeResult) -> None:
        artifact_key, meta_key = _keys(key)
        meta = json.dumps(
            {
                "success_count": result.success_count,
                "total_count": result.total_count,
                "failures": [f.to_dict() for f in result.failures],
                "attempted_ids": result.attempted_ids,
            }
        )
        redis = await self._client()
        async with redis.pipeline(transaction=True) as pipe:
            pipe.set(artifact_key, result.artifact)
            pipe.set(meta_key, meta.encode())
            await pipe.execute()
        logger.debug("Cached merge result %s (%d bytes)", key, len(result.artifact))

    async def get(self, key: str) -> MergeResult | None:
        artifact_key, meta_key = _keys(key)
        redis = await self._client()
        artifact, meta_raw = await redis.mget(artifact_key, meta_key)
        if artifact is None or meta_raw is None:
            return None
        meta = json.loads(meta_raw)
        return MergeResult(
            artifact=artifact,
            success_count=int(meta["success_count"]),
            total_count=int(meta["total_count"]),
            failures=[FailureDescriptor.from_dict(f) for f in meta["failures"]],
            attempted_ids=[int(i) for i in meta["attempted_ids"]],
        )

    async def clear(self, key: str) -> bool:
        redis = await self._client()
        removed = await redis.delete(*_keys(key))
        return removed > 0
