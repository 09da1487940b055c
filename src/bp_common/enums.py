"""Global enums — must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class PrintMode(str, Enum):
    SIMPLEX = "SIMPLEX"
    DUPLEX = "DUPLEX"
    COLOR = "COLOR"


class DocumentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    DELETED = "DELETED"


class TransactionType(str, Enum):
    TOPUP = "TOPUP"
    BILLING = "BILLING"
    REFUND = "REFUND"


class RefundStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PROCESSED = "PROCESSED"
    REJECTED = "REJECTED"
