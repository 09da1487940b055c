"""MergeEngine — combine every PENDING document of a container into one PDF.

Two phases:
  1. Fan-out fetch: one task per record, bounded by a semaphore of
     MERGE_FETCH_WORKERS. Each task returns an (id, FetchOutcome) pair and
     never raises, so one broken blob cannot cancel its siblings.
     asyncio.gather is the barrier.
  2. Validate + combine: single pass over the records in submission order,
     run in a worker thread. Each accepted document is appended copy_count
     times; rejected ones become FailureDescriptors.

A merge with zero accepted documents raises AllDocumentsFailedError and
leaves the cache untouched.
"""

import asyncio
import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bp_common.container import ContainerKey
from src.bp_common.enums import PrintMode
from src.bp_common.errors import AllDocumentsFailedError, NothingToMergeError
from src.bp_document.domain import pdf_tools
from src.bp_document.domain.blob_store import BlobStoreProtocol
from src.bp_document.domain.models import DocumentRecord
from src.bp_document.domain.repository import DocumentRepositoryProtocol
from src.bp_document.infrastructure.blob_store import LocalBlobStore
from src.bp_document.infrastructure.persistence import DocumentRepository
from src.bp_merge.domain.cache import InMemoryMergeResultCache, MergeResultCacheProtocol
from src.bp_merge.domain.models import FailureDescriptor, FetchOutcome, MergeResult

logger = logging.getLogger(__name__)


def _failure(record: DocumentRecord, reason: str) -> FailureDescriptor:
    return FailureDescriptor(
        document_id=record.id,
        owner_id=record.owner_id,
        filename=record.original_filename,
        storage_path=record.storage_path,
        print_mode=record.print_mode,
        copy_count=record.copy_count,
        reason=reason,
    )


def assemble(
    records: Sequence[DocumentRecord],
    outcomes: dict[int, FetchOutcome],
) -> tuple[bytes | None, list[FailureDescriptor]]:
    """Validate fetched bytes in record order and combine the accepted ones.

    Returns (artifact, failures); artifact is None when nothing was accepted.
    """
    parts: list[tuple[bytes, int]] = []
    failures: list[FailureDescriptor] = []
    for record in records:
        outcome = outcomes.get(record.id)
        if outcome is None:
            failures.append(_failure(record, "Download failed: no result"))
            continue
        if not outcome.ok:
            failures.append(_failure(record, outcome.error or "Download failed"))
            continue
        problem = pdf_tools.validate_pdf(outcome.data)
        if problem is not None:
            failures.append(_failure(record, problem))
            continue
        parts.append((outcome.data, record.copy_count))  # type: ignore[arg-type]

    if not parts:
        return None, failures
    return pdf_tools.combine_pdfs(parts), failures


class MergeEngine:
    def __init__(
        self,
        repo: DocumentRepositoryProtocol | None = None,
        blob_store: BlobStoreProtocol | None = None,
        cache: MergeResultCacheProtocol | None = None,
        workers: int | None = None,
    ) -> None:
        self._repo: DocumentRepositoryProtocol = repo or DocumentRepository()
        self._blobs: BlobStoreProtocol = blob_store or LocalBlobStore()
        self._cache: MergeResultCacheProtocol = cache or InMemoryMergeResultCache()
        self._workers = workers or settings.MERGE_FETCH_WORKERS

    async def merge_container(
        self,
        db: AsyncSession,
        container: ContainerKey,
        print_mode: PrintMode | None = None,
    ) -> MergeResult:
        key = container.cache_key(print_mode)
        records = await self._repo.list_pending_for_container(db, container, print_mode)
        if not records:
            raise NothingToMergeError(key)

        logger.info("Merging %d documents for %s (workers=%d)", len(records), key, self._workers)
        outcomes = await self._fetch_all(records)
        artifact, failures = await asyncio.to_thread(assemble, records, outcomes)

        for f in failures:
            logger.warning(
                "Merge %s skipped document %s (%s, owner=%s): %s",
                key, f.document_id, f.filename, f.owner_id, f.reason,
            )
        if artifact is None:
            logger.error("Merge %s produced nothing: all %d documents failed", key, len(records))
            raise AllDocumentsFailedError(key, failures)

        result = MergeResult(
            artifact=artifact,
            success_count=len(records) - len(failures),
            total_count=len(records),
            failures=failures,
            attempted_ids=[r.id for r in records],
        )
        await self._cache.put(key, result)
        logger.info(
            "Merged %s: %d/%d documents, %d bytes",
            key, result.success_count, result.total_count, len(artifact),
        )
        return result

    async def _fetch_all(self, records: Sequence[DocumentRecord]) -> dict[int, FetchOutcome]:
        semaphore = asyncio.Semaphore(self._workers)
        pairs = await asyncio.gather(*(self._fetch_one(r, semaphore) for r in records))
        return dict(pairs)

    async def _fetch_one(
        self, record: DocumentRecord, semaphore: asyncio.Semaphore
    ) -> tuple[int, FetchOutcome]:
        async with semaphore:
            try:
                data = await self._blobs.fetch(record.storage_path)
            except Exception as e:
                return record.id, FetchOutcome(error=f"Download failed: {e}")
        return record.id, FetchOutcome(data=data)
