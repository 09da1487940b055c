"""Repository Protocol for refund requests."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_refund.domain.models import RefundRequest


class RefundRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, request: RefundRequest) -> RefundRequest:
        """Raises DuplicatePendingRefundError if the owner already has a PENDING row."""
        ...

    async def get_by_id(
        self, db: AsyncSession, request_id: int, for_update: bool = False
    ) -> RefundRequest | None: ...

    async def has_pending(self, db: AsyncSession, owner_id: str) -> bool: ...

    async def update_status(
        self,
        db: AsyncSession,
        request_id: int,
        status: str,
        payout_reference: str | None,
        admin_note: str | None,
        processed_at: datetime | None,
    ) -> RefundRequest: ...

    async def list_pending(self, db: AsyncSession) -> list[RefundRequest]: ...

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[RefundRequest]: ...
