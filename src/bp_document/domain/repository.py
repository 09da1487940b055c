"""Repository Protocol for document records."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.container import ContainerKey
from src.bp_common.enums import PrintMode
from src.bp_document.domain.models import DocumentRecord, PendingContainerSummary


class DocumentRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, record: DocumentRecord) -> DocumentRecord:
        """Persist a new record; returns it with id and submitted_at assigned."""
        ...

    async def get_by_id(
        self, db: AsyncSession, document_id: int, for_update: bool = False
    ) -> DocumentRecord | None: ...

    async def list_pending_for_container(
        self,
        db: AsyncSession,
        container: ContainerKey,
        print_mode: PrintMode | None = None,
    ) -> list[DocumentRecord]:
        """PENDING records, oldest submission first (ties by id)."""
        ...

    async def mark_processed(self, db: AsyncSession, document_ids: list[int]) -> int:
        """PENDING -> PROCESSED for the given ids; returns rows changed."""
        ...

    async def delete(self, db: AsyncSession, document_id: int) -> None: ...

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[DocumentRecord]: ...

    async def summarize_pending(self, db: AsyncSession) -> list[PendingContainerSummary]: ...
