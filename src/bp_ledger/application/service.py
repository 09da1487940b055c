"""LedgerService — the only component that reads or writes member balances.

credit / debit / refund_credit join the caller's DB transaction: the
balance mutation and its Transaction row are written together and become
visible only when the caller commits. topup is a self-contained use case
and commits on its own.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.enums import TransactionType
from src.bp_common.errors import InvalidAmountError
from src.bp_common.money import ZERO, to_money
from src.bp_ledger.application.schemas import (
    BalanceResponse,
    LedgerVerifyResponse,
    TopupResponse,
    TransactionItem,
    TransactionListResponse,
)
from src.bp_ledger.domain.invariants import verify_transaction_chain
from src.bp_ledger.domain.models import Transaction
from src.bp_ledger.domain.repository import LedgerRepositoryProtocol
from src.bp_ledger.infrastructure.persistence import LedgerRepository

_CREDIT_TYPES = (TransactionType.TOPUP, TransactionType.REFUND)


def _positive_amount(amount: Decimal | int | str) -> Decimal:
    try:
        value = to_money(amount)
    except ValueError as e:
        raise InvalidAmountError(str(e)) from None
    if value <= ZERO:
        raise InvalidAmountError(f"amount must be greater than 0.00, got {value}")
    return value


class LedgerService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    # ------------------------------------------------------------------
    # Mutations (caller owns the transaction)
    # ------------------------------------------------------------------

    async def credit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal | int | str,
        tx_type: TransactionType,
        description: str,
        reference_id: str | None = None,
    ) -> Transaction:
        if TransactionType(tx_type) not in _CREDIT_TYPES:
            raise ValueError(f"credit only records TOPUP or REFUND, got {tx_type}")
        value = _positive_amount(amount)
        _, tx = await self._repo.apply_credit(
            db, owner_id, value, TransactionType(tx_type).value, description, reference_id
        )
        return tx

    async def debit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal | int | str,
        description: str,
        reference_id: str | None = None,
    ) -> Transaction:
        """Raises InsufficientBalanceError (no side effects) if balance < amount."""
        value = _positive_amount(amount)
        _, tx = await self._repo.apply_debit(db, owner_id, value, description, reference_id)
        return tx

    async def refund_credit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal | int | str,
        description: str,
    ) -> Transaction:
        return await self.credit(db, owner_id, amount, TransactionType.REFUND, description)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def balance_of(self, db: AsyncSession, owner_id: str) -> Decimal:
        account = await self._repo.get_account(db, owner_id)
        return account.balance if account else ZERO

    async def has_sufficient_balance(
        self, db: AsyncSession, owner_id: str, amount: Decimal
    ) -> bool:
        return await self.balance_of(db, owner_id) >= amount

    async def get_balance(self, db: AsyncSession, owner_id: str) -> BalanceResponse:
        return BalanceResponse.from_amount(owner_id, await self.balance_of(db, owner_id))

    async def list_transactions(
        self, db: AsyncSession, owner_id: str, limit: int | None = None
    ) -> TransactionListResponse:
        """Newest first; limit=None returns the whole history."""
        txs = await self._repo.list_transactions(db, owner_id, limit, oldest_first=False)
        return TransactionListResponse(items=[TransactionItem.from_domain(t) for t in txs])

    async def verify_account(self, db: AsyncSession, owner_id: str) -> LedgerVerifyResponse:
        account = await self._repo.get_account(db, owner_id)
        txs = await self._repo.list_transactions(db, owner_id, None, oldest_first=True)
        violations = verify_transaction_chain(txs, account)
        return LedgerVerifyResponse(
            owner_id=owner_id,
            transactions_checked=len(txs),
            ok=not violations,
            violations=violations,
        )

    # ------------------------------------------------------------------
    # Self-contained use cases
    # ------------------------------------------------------------------

    async def topup(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        reference_id: str | None,
        description: str | None = None,
    ) -> TopupResponse:
        try:
            tx = await self.credit(
                db,
                owner_id,
                amount,
                TransactionType.TOPUP,
                description or "Balance top-up",
                reference_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return TopupResponse.from_transaction(tx)
