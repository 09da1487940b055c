"""Domain models for bp_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class LedgerAccount:
    owner_id: str
    balance: Decimal         # scale 2, never negative
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Transaction:
    id: int                          # BIGSERIAL
    owner_id: str
    tx_type: str                     # TransactionType value
    amount: Decimal                  # signed: BILLING negative, TOPUP/REFUND positive
    balance_after: Decimal           # balance snapshot after this mutation
    description: str | None = None
    reference_id: str | None = None
    created_at: datetime | None = None
