"""MergeService — operator use cases around the merge engine and its cache.

The engine and this service share one cache instance, so an artifact merged
through merge() is what get_cached_artifact() serves and what
mark_container_processed() reads its attempted ids from.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bp_common.container import ContainerKey
from src.bp_common.enums import PrintMode
from src.bp_common.errors import DocumentNotFoundError, MergedArtifactNotFoundError
from src.bp_document.domain.blob_store import BlobStoreProtocol
from src.bp_document.domain.models import DocumentRecord
from src.bp_document.domain.repository import DocumentRepositoryProtocol
from src.bp_document.infrastructure.blob_store import LocalBlobStore
from src.bp_document.infrastructure.persistence import DocumentRepository
from src.bp_merge.application.schemas import (
    ClearCacheResponse,
    FailureItem,
    FailureListResponse,
    MarkProcessedResponse,
    MergeSummaryResponse,
    PendingContainerItem,
    PendingContainersResponse,
)
from src.bp_merge.domain.cache import InMemoryMergeResultCache, MergeResultCacheProtocol
from src.bp_merge.engine.merge_engine import MergeEngine
from src.bp_merge.infrastructure.redis_cache import RedisMergeResultCache

logger = logging.getLogger(__name__)


def build_merge_cache(backend: str | None = None) -> MergeResultCacheProtocol:
    """'memory' for a single worker, 'redis' when several API workers share results."""
    choice = (backend or settings.MERGE_CACHE_BACKEND).lower()
    if choice == "redis":
        return RedisMergeResultCache()
    if choice == "memory":
        return InMemoryMergeResultCache()
    raise ValueError(f"Unknown MERGE_CACHE_BACKEND: {choice!r}")


class MergeService:
    def __init__(
        self,
        repo: DocumentRepositoryProtocol | None = None,
        blob_store: BlobStoreProtocol | None = None,
        cache: MergeResultCacheProtocol | None = None,
        engine: MergeEngine | None = None,
    ) -> None:
        self._repo: DocumentRepositoryProtocol = repo or DocumentRepository()
        self._blobs: BlobStoreProtocol = blob_store or LocalBlobStore()
        self._cache: MergeResultCacheProtocol = cache or build_merge_cache()
        self._engine = engine or MergeEngine(self._repo, self._blobs, self._cache)

    async def merge(
        self, db: AsyncSession, container: ContainerKey, print_mode: PrintMode | None = None
    ) -> MergeSummaryResponse:
        result = await self._engine.merge_container(db, container, print_mode)
        return MergeSummaryResponse.from_result(container.cache_key(print_mode), result)

    async def get_cached_artifact(
        self, container: ContainerKey, print_mode: PrintMode | None = None
    ) -> bytes:
        key = container.cache_key(print_mode)
        cached = await self._cache.get(key)
        if cached is None:
            raise MergedArtifactNotFoundError(key)
        return cached.artifact

    async def get_failures(
        self, container: ContainerKey, print_mode: PrintMode | None = None
    ) -> FailureListResponse:
        """Failures of the last cached merge; empty when nothing is cached."""
        key = container.cache_key(print_mode)
        cached = await self._cache.get(key)
        failures = cached.failures if cached else []
        return FailureListResponse(
            cache_key=key, failures=[FailureItem.from_domain(f) for f in failures]
        )

    async def mark_container_processed(
        self, db: AsyncSession, container: ContainerKey, print_mode: PrintMode | None = None
    ) -> MarkProcessedResponse:
        """PENDING -> PROCESSED for every record the last merge attempted.

        Failed documents are included: they were billed at submission and
        stay accounted for as part of this run.
        """
        key = container.cache_key(print_mode)
        cached = await self._cache.get(key)
        if cached is None:
            raise MergedArtifactNotFoundError(key)
        try:
            marked = await self._repo.mark_processed(db, cached.attempted_ids)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if cached.failures:
            logger.warning(
                "Container %s marked PROCESSED with %d failed documents: %s",
                key, len(cached.failures), [f.document_id for f in cached.failures],
            )
        return MarkProcessedResponse(
            cache_key=key, attempted=len(cached.attempted_ids), marked=marked
        )

    async def clear_cached(
        self, container: ContainerKey, print_mode: PrintMode | None = None
    ) -> ClearCacheResponse:
        key = container.cache_key(print_mode)
        cleared = await self._cache.clear(key)
        return ClearCacheResponse(cache_key=key, cleared=cleared)

    async def fetch_document(
        self, db: AsyncSession, document_id: int
    ) -> tuple[DocumentRecord, bytes]:
        """Raw stored bytes of one document, for printing a failed item by hand."""
        record = await self._repo.get_by_id(db, document_id)
        if record is None:
            raise DocumentNotFoundError(document_id)
        return record, await self._blobs.fetch(record.storage_path)

    async def list_pending_containers(self, db: AsyncSession) -> PendingContainersResponse:
        summaries = await self._repo.summarize_pending(db)
        return PendingContainersResponse(
            items=[PendingContainerItem.from_domain(s) for s in summaries]
        )
