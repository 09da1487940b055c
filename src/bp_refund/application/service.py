"""RefundService — member balance withdrawals, approved by an operator.

request() reserves nothing: the balance stays spendable until approve()
re-checks it and debits the full requested amount (the fee is kept by the
service, the member receives net_payout out-of-band).
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bp_common.datetime_utils import utc_now
from src.bp_common.enums import RefundStatus
from src.bp_common.errors import (
    DuplicatePendingRefundError,
    InsufficientBalanceError,
    InvalidAmountError,
    NetPayoutNonPositiveError,
    RefundNotFoundError,
)
from src.bp_common.money import ZERO, to_money
from src.bp_ledger.application.service import LedgerService
from src.bp_refund.application.schemas import RefundListResponse, RefundResponse
from src.bp_refund.domain.models import RefundRequest, quote_refund, transition_refund
from src.bp_refund.domain.repository import RefundRepositoryProtocol
from src.bp_refund.infrastructure.persistence import RefundRepository

logger = logging.getLogger(__name__)


class RefundService:
    def __init__(
        self,
        repo: RefundRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
        fee_percent: Decimal | None = None,
    ) -> None:
        self._repo: RefundRepositoryProtocol = repo or RefundRepository()
        self._ledger = ledger or LedgerService()
        self._fee_percent = fee_percent if fee_percent is not None else settings.REFUND_FEE_PERCENT

    async def request(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        payout_channel_id: str,
        reason: str | None = None,
    ) -> RefundResponse:
        try:
            if await self._repo.has_pending(db, owner_id):
                raise DuplicatePendingRefundError()
            try:
                requested = to_money(amount)
            except ValueError as e:
                raise InvalidAmountError(str(e)) from None
            if requested <= ZERO:
                raise InvalidAmountError(f"amount must be greater than 0.00, got {requested}")
            balance = await self._ledger.balance_of(db, owner_id)
            if requested > balance:
                raise InvalidAmountError(
                    f"requested {requested} exceeds current balance {balance}"
                )
            quote = quote_refund(requested, self._fee_percent)
            if quote.net_payout <= ZERO:
                raise NetPayoutNonPositiveError(quote.net_payout)

            saved = await self._repo.insert(
                db,
                RefundRequest(
                    id=0,
                    owner_id=owner_id,
                    amount_requested=quote.amount,
                    fee_percent=quote.fee_percent,
                    fee_amount=quote.fee_amount,
                    net_payout=quote.net_payout,
                    payout_channel_id=payout_channel_id,
                    reason=reason,
                    status=RefundStatus.PENDING.value,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Refund request %s owner=%s amount=%s fee=%s net=%s",
            saved.id, owner_id, saved.amount_requested, saved.fee_amount, saved.net_payout,
        )
        return RefundResponse.from_domain(saved)

    async def approve(
        self,
        db: AsyncSession,
        request_id: int,
        payout_reference: str,
        note: str | None = None,
    ) -> RefundResponse:
        """Debit the full requested amount and mark PROCESSED, in one DB transaction."""
        try:
            current = await self._repo.get_by_id(db, request_id, for_update=True)
            if current is None:
                raise RefundNotFoundError(request_id)
            transition_refund(current.status, RefundStatus.APPROVED)

            # Funds may have been spent since the request was filed.
            balance = await self._ledger.balance_of(db, current.owner_id)
            if balance < current.amount_requested:
                raise InsufficientBalanceError(current.amount_requested, balance)

            await self._ledger.debit(
                db,
                current.owner_id,
                current.amount_requested,
                f"Balance withdrawal for refund request #{current.id}",
                reference_id=payout_reference,
            )
            status = transition_refund(RefundStatus.APPROVED, RefundStatus.PROCESSED)
            updated = await self._repo.update_status(
                db, request_id, status.value, payout_reference, note, utc_now()
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Refund request %s approved: debited %s owner=%s payout_ref=%s",
            request_id, updated.amount_requested, updated.owner_id, payout_reference,
        )
        return RefundResponse.from_domain(updated)

    async def reject(
        self, db: AsyncSession, request_id: int, note: str | None = None
    ) -> RefundResponse:
        try:
            current = await self._repo.get_by_id(db, request_id, for_update=True)
            if current is None:
                raise RefundNotFoundError(request_id)
            status = transition_refund(current.status, RefundStatus.REJECTED)
            updated = await self._repo.update_status(
                db, request_id, status.value, None, note, utc_now()
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Refund request %s rejected", request_id)
        return RefundResponse.from_domain(updated)

    async def list_pending(self, db: AsyncSession) -> RefundListResponse:
        """Oldest first: the operator queue."""
        items = await self._repo.list_pending(db)
        return RefundListResponse(items=[RefundResponse.from_domain(r) for r in items])

    async def list_by_member(self, db: AsyncSession, owner_id: str) -> RefundListResponse:
        items = await self._repo.list_by_owner(db, owner_id)
        return RefundListResponse(items=[RefundResponse.from_domain(r) for r in items])
