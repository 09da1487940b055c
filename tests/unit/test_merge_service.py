"""Unit tests for MergeService operator workflow."""

from decimal import Decimal

import pytest

from src.bp_common.enums import DocumentStatus, PrintMode
from src.bp_common.errors import DocumentNotFoundError, MergedArtifactNotFoundError
from src.bp_merge.application.service import MergeService, build_merge_cache
from src.bp_merge.domain.cache import InMemoryMergeResultCache
from src.bp_merge.infrastructure.redis_cache import RedisMergeResultCache


@pytest.fixture
def service(document_repo, blob_store) -> MergeService:
    return MergeService(repo=document_repo, blob_store=blob_store, cache=InMemoryMergeResultCache())


async def _seed(document_repo, blob_store, make_record, db, make_pdf):
    blob_store.blobs["good.pdf"] = make_pdf(2)
    blob_store.blobs["bad.pdf"] = b"junk"
    good = await document_repo.insert(db, make_record(storage_path="good.pdf", total_cost=Decimal("4.00")))
    bad = await document_repo.insert(db, make_record(storage_path="bad.pdf", total_cost=Decimal("2.00")))
    return good, bad


class TestMergeAndDownload:
    async def test_merge_then_download(self, service, db, container, document_repo, blob_store, make_record, make_pdf) -> None:
        await _seed(document_repo, blob_store, make_record, db, make_pdf)

        summary = await service.merge(db, container)
        artifact = await service.get_cached_artifact(container)

        assert summary.success_count == 1
        assert summary.failure_count == 1
        assert summary.artifact_bytes == len(artifact)
        assert artifact.startswith(b"%PDF")

    async def test_download_without_merge(self, service, container) -> None:
        with pytest.raises(MergedArtifactNotFoundError):
            await service.get_cached_artifact(container, PrintMode.COLOR)

    async def test_failures_empty_when_nothing_cached(self, service, container) -> None:
        result = await service.get_failures(container)
        assert result.failures == []

    async def test_failures_from_last_merge(self, service, db, container, document_repo, blob_store, make_record, make_pdf) -> None:
        _, bad = await _seed(document_repo, blob_store, make_record, db, make_pdf)
        await service.merge(db, container)
        result = await service.get_failures(container)
        assert [f.document_id for f in result.failures] == [bad.id]


class TestMarkContainerProcessed:
    async def test_marks_all_attempted_including_failed(self, service, db, container, document_repo, blob_store, make_record, make_pdf) -> None:
        good, bad = await _seed(document_repo, blob_store, make_record, db, make_pdf)
        await service.merge(db, container)

        result = await service.mark_container_processed(db, container)

        assert result.attempted == 2
        assert result.marked == 2
        assert document_repo.records[good.id].status == DocumentStatus.PROCESSED
        assert document_repo.records[bad.id].status == DocumentStatus.PROCESSED
        db.commit.assert_awaited_once()

    async def test_leaves_documents_submitted_after_merge(self, service, db, container, document_repo, blob_store, make_record, make_pdf) -> None:
        await _seed(document_repo, blob_store, make_record, db, make_pdf)
        await service.merge(db, container)
        late = await document_repo.insert(db, make_record(storage_path="late.pdf"))

        await service.mark_container_processed(db, container)

        assert document_repo.records[late.id].status == DocumentStatus.PENDING

    async def test_requires_cached_merge(self, service, db, container) -> None:
        with pytest.raises(MergedArtifactNotFoundError):
            await service.mark_container_processed(db, container)
        db.commit.assert_not_awaited()


class TestOtherOperations:
    async def test_clear_cached(self, service, db, container, document_repo, blob_store, make_record, make_pdf) -> None:
        await _seed(document_repo, blob_store, make_record, db, make_pdf)
        await service.merge(db, container)
        assert (await service.clear_cached(container)).cleared is True
        with pytest.raises(MergedArtifactNotFoundError):
            await service.get_cached_artifact(container)

    async def test_fetch_document(self, service, db, document_repo, blob_store, make_record, make_pdf) -> None:
        good, _ = await _seed(document_repo, blob_store, make_record, db, make_pdf)
        record, data = await service.fetch_document(db, good.id)
        assert record.id == good.id
        assert data == blob_store.blobs["good.pdf"]

    async def test_fetch_unknown_document(self, service, db) -> None:
        with pytest.raises(DocumentNotFoundError):
            await service.fetch_document(db, 999)

    async def test_list_pending_containers(self, service, db, container, document_repo, blob_store, make_record, make_pdf) -> None:
        await _seed(document_repo, blob_store, make_record, db, make_pdf)
        await document_repo.insert(db, make_record(print_mode=PrintMode.DUPLEX, copy_count=3, total_cost=Decimal("6.00")))

        result = await service.list_pending_containers(db)

        by_mode = {item.print_mode: item for item in result.items}
        assert by_mode["SIMPLEX"].document_count == 2
        assert by_mode["SIMPLEX"].total_cost == Decimal("6.00")
        assert by_mode["DUPLEX"].total_copies == 3
        assert by_mode["DUPLEX"].container.group == container.group


class TestBuildMergeCache:
    def test_memory(self) -> None:
        assert isinstance(build_merge_cache("memory"), InMemoryMergeResultCache)

    def test_redis(self) -> None:
        assert isinstance(build_merge_cache("redis"), RedisMergeResultCache)

    def test_unknown(self) -> None:
        with pytest.raises(ValueError):
            build_merge_cache("memcached")
