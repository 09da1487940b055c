"""Pydantic schemas for bp_refund API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bp_common.datetime_utils import to_iso
from src.bp_common.money import money_to_display
from src.bp_refund.domain.models import RefundRequest

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateRefundRequest(BaseModel):
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    payout_channel_id: str = Field(..., min_length=1, max_length=100, description="e.g. a UPI id")
    reason: str | None = Field(None, max_length=500)


class ApproveRefundRequest(BaseModel):
    payout_reference: str = Field(..., min_length=1, max_length=100)
    note: str | None = Field(None, max_length=500)


class RejectRefundRequest(BaseModel):
    note: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RefundResponse(BaseModel):
    id: int
    owner_id: str
    amount_requested: Decimal
    fee_percent: Decimal
    fee_amount: Decimal
    net_payout: Decimal
    net_payout_display: str
    payout_channel_id: str
    reason: str | None
    status: str
    admin_note: str | None
    payout_reference: str | None
    created_at: str
    processed_at: str | None

    @classmethod
    def from_domain(cls, r: RefundRequest) -> "RefundResponse":
        return cls(
            id=r.id,
            owner_id=r.owner_id,
            amount_requested=r.amount_requested,
            fee_percent=r.fee_percent,
            fee_amount=r.fee_amount,
            net_payout=r.net_payout,
            net_payout_display=money_to_display(r.net_payout),
            payout_channel_id=r.payout_channel_id,
            reason=r.reason,
            status=r.status,
            admin_note=r.admin_note,
            payout_reference=r.payout_reference,
            created_at=to_iso(r.created_at),
            processed_at=to_iso(r.processed_at) if r.processed_at else None,
        )


class RefundListResponse(BaseModel):
    items: list[RefundResponse]
