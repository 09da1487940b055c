"""DocumentService — ingestion, submission with billing, and deletion with refund.

ingest() validates and stores a document without touching the ledger and
without committing. submit() is the member-facing use case: ingest, debit the
quoted cost, commit; any failure rolls back the DB transaction and removes the
stored blob so no PENDING record exists without a matching charge.
"""

import asyncio
import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bp_common.enums import DocumentStatus, PrintMode
from src.bp_common.errors import (
    DocumentNotFoundError,
    DocumentNotPendingError,
    EmptyFileError,
    FileTooLargeError,
    IncompleteProfileError,
    InvalidCopyCountError,
    MissingExtensionError,
    NotOwnerError,
    UnsupportedContentTypeError,
)
from src.bp_common.money import money_to_display
from src.bp_document.application.schemas import (
    DeleteDocumentResponse,
    DocumentListResponse,
    DocumentResponse,
    SubmitDocumentResponse,
)
from src.bp_document.domain import pdf_tools
from src.bp_document.domain.blob_store import BlobStoreProtocol
from src.bp_document.domain.models import DocumentRecord, UploadedFile, transition_document
from src.bp_document.domain.pricing import PriceTable, cost
from src.bp_document.domain.repository import DocumentRepositoryProtocol
from src.bp_document.infrastructure.blob_store import LocalBlobStore
from src.bp_document.infrastructure.persistence import DocumentRepository
from src.bp_ledger.application.service import LedgerService
from src.bp_member.domain.models import MemberProfile

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(
        self,
        repo: DocumentRepositoryProtocol | None = None,
        blob_store: BlobStoreProtocol | None = None,
        ledger: LedgerService | None = None,
        prices: PriceTable | None = None,
    ) -> None:
        self._repo: DocumentRepositoryProtocol = repo or DocumentRepository()
        self._blobs: BlobStoreProtocol = blob_store or LocalBlobStore()
        self._ledger = ledger or LedgerService()
        self._prices = prices

    # ------------------------------------------------------------------
    # Ingestion (caller owns the transaction)
    # ------------------------------------------------------------------

    def _check_upload(self, file: UploadedFile, profile: MemberProfile, copy_count: int) -> None:
        """Preconditions in fixed order; the first failure wins."""
        if file.size == 0:
            raise EmptyFileError()
        if file.content_type != settings.ALLOWED_CONTENT_TYPE:
            raise UnsupportedContentTypeError(file.content_type, settings.ALLOWED_CONTENT_TYPE)
        if file.size > settings.MAX_UPLOAD_BYTES:
            raise FileTooLargeError(file.size, settings.MAX_UPLOAD_BYTES)
        if file.extension is None:
            raise MissingExtensionError(file.filename)
        missing = profile.missing_container_fields()
        if missing:
            raise IncompleteProfileError(missing)
        if not 1 <= copy_count <= settings.MAX_COPY_COUNT:
            raise InvalidCopyCountError(copy_count, settings.MAX_COPY_COUNT)

    async def ingest(
        self,
        db: AsyncSession,
        file: UploadedFile,
        profile: MemberProfile,
        copy_count: int,
        print_mode: PrintMode,
    ) -> DocumentRecord:
        self._check_upload(file, profile, copy_count)
        mode = PrintMode(print_mode)
        container = profile.container_key()

        page_count = await asyncio.to_thread(pdf_tools.count_pages, file.data)
        quote = cost(page_count, copy_count, mode, self._prices)

        data = file.data
        if quote.billed_pages > page_count:
            data = await asyncio.to_thread(pdf_tools.append_blank_page, data)

        filename = file.filename or f"document.{file.extension}"
        storage_path = await self._blobs.store(data, filename, container.cache_key())
        record = DocumentRecord(
            id=0,
            owner_id=profile.id,
            original_filename=filename,
            storage_path=storage_path,
            container=container,
            byte_size=len(data),
            status=DocumentStatus.PENDING.value,
            print_mode=mode.value,
            copy_count=copy_count,
            page_count=page_count,
            billed_page_count=quote.billed_pages,
            total_cost=quote.total_cost,
        )
        try:
            saved = await self._repo.insert(db, record)
        except Exception:
            await self._discard_blob(storage_path)
            raise
        logger.info(
            "Ingested document %s owner=%s container=%s mode=%s pages=%d billed=%d copies=%d cost=%s",
            saved.id, saved.owner_id, container.cache_key(), mode.value,
            page_count, quote.billed_pages, copy_count, quote.total_cost,
        )
        return saved

    async def _discard_blob(self, storage_path: str) -> None:
        try:
            await self._blobs.delete(storage_path)
        except Exception:
            logger.exception("Failed to remove orphaned blob %s", storage_path)
        else:
            logger.warning("Removed orphaned blob %s after failed submission", storage_path)

    # ------------------------------------------------------------------
    # Self-contained use cases
    # ------------------------------------------------------------------

    async def submit(
        self,
        db: AsyncSession,
        file: UploadedFile,
        profile: MemberProfile,
        copy_count: int,
        print_mode: PrintMode,
    ) -> SubmitDocumentResponse:
        record = None
        try:
            record = await self.ingest(db, file, profile, copy_count, print_mode)
            tx = await self._ledger.debit(
                db,
                profile.id,
                record.total_cost,
                f"Print job: {record.original_filename} ({record.print_mode} x{record.copy_count})",
                reference_id=f"document:{record.id}",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            if record is not None:
                await self._discard_blob(record.storage_path)
            raise
        return SubmitDocumentResponse(
            document=DocumentResponse.from_domain(record),
            transaction_id=tx.id,
            charged=record.total_cost,
            balance=tx.balance_after,
            balance_display=money_to_display(tx.balance_after),
        )

    async def delete_pending(
        self, db: AsyncSession, document_id: int, owner_id: str
    ) -> DeleteDocumentResponse:
        """Refund and remove a PENDING document; returns the refunded amount."""
        try:
            record = await self._repo.get_by_id(db, document_id, for_update=True)
            if record is None:
                raise DocumentNotFoundError(document_id)
            if record.owner_id != owner_id:
                raise NotOwnerError(document_id)
            if not record.is_pending:
                raise DocumentNotPendingError(document_id, record.status)
            transition_document(record.status, DocumentStatus.DELETED)

            refund: Decimal = record.total_cost
            await self._ledger.refund_credit(
                db, owner_id, refund, f"Refund for deleted document: {record.original_filename}"
            )
            await self._repo.delete(db, document_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        # only after commit; a failure here leaves an orphan file, never a record without bytes
        try:
            await self._blobs.delete(record.storage_path)
        except Exception:
            logger.exception(
                "Document %s deleted but blob %s could not be removed", document_id, record.storage_path
            )
        logger.info("Deleted document %s owner=%s refunded=%s", document_id, owner_id, refund)
        return DeleteDocumentResponse(
            document_id=document_id, refunded=refund, refunded_display=money_to_display(refund)
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_member_documents(self, db: AsyncSession, owner_id: str) -> DocumentListResponse:
        records = await self._repo.list_by_owner(db, owner_id)
        return DocumentListResponse(items=[DocumentResponse.from_domain(r) for r in records])
