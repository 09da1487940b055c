"""Ledger audit-trail invariants.

Replaying a member's transactions in (created_at, id) order by summing the
signed amounts must reproduce every stored balance_after exactly, and no
snapshot may be negative.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal

from src.bp_common.enums import TransactionType
from src.bp_common.money import ZERO
from src.bp_ledger.domain.models import LedgerAccount, Transaction

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _replay_order(tx: Transaction) -> tuple[datetime, int]:
    return (tx.created_at or _EPOCH, tx.id)


def verify_transaction_chain(
    transactions: Iterable[Transaction],
    account: LedgerAccount | None = None,
) -> list[str]:
    """Replay transactions and return a list of violation strings (empty = consistent)."""
    violations: list[str] = []
    running = ZERO
    last: Transaction | None = None
    for tx in sorted(transactions, key=_replay_order):
        expected_negative = tx.tx_type == TransactionType.BILLING
        if expected_negative and tx.amount >= 0:
            violations.append(f"tx {tx.id}: BILLING amount must be negative, got {tx.amount}")
        elif not expected_negative and tx.amount <= 0:
            violations.append(f"tx {tx.id}: {tx.tx_type} amount must be positive, got {tx.amount}")
        running += tx.amount
        if running != tx.balance_after:
            violations.append(
                f"tx {tx.id}: replayed balance {running} != stored balance_after {tx.balance_after}"
            )
            # Resync so one bad row is reported once, not for every later row
            running = tx.balance_after
        if tx.balance_after < 0:
            violations.append(f"tx {tx.id}: negative balance_after {tx.balance_after}")
        last = tx

    if account is not None:
        final: Decimal = last.balance_after if last is not None else ZERO
        if account.balance != final:
            violations.append(
                f"account {account.owner_id}: balance {account.balance} != last snapshot {final}"
            )

    for msg in violations:
        logger.error("Ledger invariant violated: %s", msg)
    return violations
