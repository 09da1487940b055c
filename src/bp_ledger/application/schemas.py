"""Pydantic schemas for bp_ledger API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bp_common.datetime_utils import to_iso
from src.bp_common.money import money_to_display
from src.bp_ledger.domain.models import Transaction

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TopupRequest(BaseModel):
    owner_id: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    reference_id: str | None = Field(None, max_length=100, description="Payment gateway reference")
    description: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    owner_id: str
    balance: Decimal
    balance_display: str

    @classmethod
    def from_amount(cls, owner_id: str, balance: Decimal) -> "BalanceResponse":
        return cls(owner_id=owner_id, balance=balance, balance_display=money_to_display(balance))


class TransactionItem(BaseModel):
    id: int
    tx_type: str
    amount: Decimal
    amount_display: str
    balance_after: Decimal
    balance_after_display: str
    description: str | None
    reference_id: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            tx_type=tx.tx_type,
            amount=tx.amount,
            amount_display=money_to_display(tx.amount),
            balance_after=tx.balance_after,
            balance_after_display=money_to_display(tx.balance_after),
            description=tx.description,
            reference_id=tx.reference_id,
            created_at=to_iso(tx.created_at),
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]


class TopupResponse(BaseModel):
    transaction_id: int
    credited: Decimal
    balance: Decimal
    balance_display: str

    @classmethod
    def from_transaction(cls, tx: Transaction) -> "TopupResponse":
        return cls(
            transaction_id=tx.id,
            credited=tx.amount,
            balance=tx.balance_after,
            balance_display=money_to_display(tx.balance_after),
        )


class LedgerVerifyResponse(BaseModel):
    owner_id: str
    transactions_checked: int
    ok: bool
    violations: list[str]
