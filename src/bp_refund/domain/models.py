"""Refund domain models — withdrawal requests, fee policy, status transitions."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bp_common.enums import RefundStatus
from src.bp_common.errors import InvalidStateTransitionError
from src.bp_common.money import quantize_money

_HUNDRED = Decimal("100")

# APPROVED is transient: approve() passes through it to PROCESSED in one unit.
_ALLOWED_TRANSITIONS: dict[RefundStatus, frozenset[RefundStatus]] = {
    RefundStatus.PENDING: frozenset({RefundStatus.APPROVED, RefundStatus.REJECTED}),
    RefundStatus.APPROVED: frozenset({RefundStatus.PROCESSED}),
    RefundStatus.PROCESSED: frozenset(),
    RefundStatus.REJECTED: frozenset(),
}


def transition_refund(current: str, target: RefundStatus) -> RefundStatus:
    cur = RefundStatus(current)
    tgt = RefundStatus(target)
    if tgt not in _ALLOWED_TRANSITIONS[cur]:
        raise InvalidStateTransitionError("RefundRequest", cur.value, tgt.value)
    return tgt


@dataclass(frozen=True)
class RefundQuote:
    amount: Decimal
    fee_percent: Decimal
    fee_amount: Decimal
    net_payout: Decimal


def quote_refund(amount: Decimal, fee_percent: Decimal) -> RefundQuote:
    """fee = round(amount * pct / 100, 2 HALF_UP); net = amount - fee.

    50.00 @ 2% -> fee 1.00, net 49.00. net may be <= 0; the caller rejects it.
    """
    requested = quantize_money(amount)
    fee = quantize_money(requested * fee_percent / _HUNDRED)
    return RefundQuote(
        amount=requested,
        fee_percent=fee_percent,
        fee_amount=fee,
        net_payout=requested - fee,
    )


@dataclass
class RefundRequest:
    id: int                              # BIGSERIAL; 0 until persisted
    owner_id: str
    amount_requested: Decimal
    fee_percent: Decimal
    fee_amount: Decimal
    net_payout: Decimal
    payout_channel_id: str               # where the member wants the money sent
    status: str                          # RefundStatus value
    reason: str | None = None
    admin_note: str | None = None
    payout_reference: str | None = None  # set by the operator on approval
    created_at: datetime | None = None
    processed_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == RefundStatus.PENDING
