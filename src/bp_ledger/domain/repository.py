"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_ledger.domain.models import LedgerAccount, Transaction


class LedgerRepositoryProtocol(Protocol):
    async def get_account(
        self, db: AsyncSession, owner_id: str
    ) -> LedgerAccount | None: ...

    async def apply_credit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        tx_type: str,
        description: str,
        reference_id: str | None,
    ) -> tuple[LedgerAccount, Transaction]: ...

    async def apply_debit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        description: str,
        reference_id: str | None,
    ) -> tuple[LedgerAccount, Transaction]: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        owner_id: str,
        limit: int | None,
        oldest_first: bool,
    ) -> list[Transaction]: ...
