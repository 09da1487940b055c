"""Merge Result Cache — last merged artifact per (container[, print mode]) key.

Entries are overwritten by the next merge of the same key and removed only
by an explicit clear(); there is no eviction.
"""

import threading
from typing import Protocol

from src.bp_merge.domain.models import MergeResult


class MergeResultCacheProtocol(Protocol):
    async def put(self, key: str, result: MergeResult) -> None: ...

    async def get(self, key: str) -> MergeResult | None: ...

    async def clear(self, key: str) -> bool:
        """Remove the entry; True if something was removed."""
        ...


class InMemoryMergeResultCache:
    """Process-local cache; safe for concurrent access from threads and tasks."""

    def __init__(self) -> None:
        self._entries: dict[str, MergeResult] = {}
        self._lock = threading.Lock()

    async def put(self, key: str, result: MergeResult) -> None:
        with self._lock:
            self._entries[key] = result

    async def get(self, key: str) -> MergeResult | None:
        with self._lock:
            return self._entries.get(key)

    async def clear(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None
