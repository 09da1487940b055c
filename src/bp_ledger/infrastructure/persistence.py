"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

Every balance mutation is a single PostgreSQL statement (upsert or guarded
UPDATE ... RETURNING) immediately followed by the transaction insert, both in
the caller's DB transaction. The row lock taken by the UPDATE serialises
concurrent debits on one account; 0 rows returned means the balance guard
rejected the debit.

Transaction ownership: The CALLER (application service) is responsible for
commit / rollback.
"""

import logging
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.enums import TransactionType
from src.bp_common.errors import InsufficientBalanceError, InternalError
from src.bp_common.money import ZERO
from src.bp_ledger.domain.models import LedgerAccount, Transaction

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL: ledger_accounts mutations
# ---------------------------------------------------------------------------

_CREDIT_SQL = text("""
    INSERT INTO ledger_accounts (owner_id, balance)
    VALUES (:owner_id, :amount)
    ON CONFLICT (owner_id) DO UPDATE
        SET balance = ledger_accounts.balance + EXCLUDED.balance,
            version = ledger_accounts.version + 1,
            updated_at = NOW()
    RETURNING owner_id, balance, version, created_at, updated_at
""")

_DEBIT_SQL = text("""
    UPDATE ledger_accounts
    SET balance = balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE owner_id = :owner_id AND balance >= :amount
    RETURNING owner_id, balance, version, created_at, updated_at
""")

_GET_ACCOUNT_SQL = text("""
    SELECT owner_id, balance, version, created_at, updated_at
    FROM ledger_accounts
    WHERE owner_id = :owner_id
""")

# ---------------------------------------------------------------------------
# SQL: ledger_transactions (append-only)
# ---------------------------------------------------------------------------

_INSERT_TX_SQL = text("""
    INSERT INTO ledger_transactions
        (owner_id, tx_type, amount, balance_after, description, reference_id)
    VALUES
        (:owner_id, :tx_type, :amount, :balance_after, :description, :reference_id)
    RETURNING id, owner_id, tx_type, amount, balance_after,
              description, reference_id, created_at
""")

_LIST_TX_NEWEST_SQL = text("""
    SELECT id, owner_id, tx_type, amount, balance_after,
           description, reference_id, created_at
    FROM ledger_transactions
    WHERE owner_id = :owner_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_TX_OLDEST_SQL = text("""
    SELECT id, owner_id, tx_type, amount, balance_after,
           description, reference_id, created_at
    FROM ledger_transactions
    WHERE owner_id = :owner_id
    ORDER BY created_at ASC, id ASC
    LIMIT :limit
""")


def _row_to_account(row: object) -> LedgerAccount:
    return LedgerAccount(
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_tx(row: object) -> Transaction:
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        tx_type=row.tx_type,  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        balance_after=Decimal(row.balance_after),  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository — all mutations atomic at the SQL level."""

    async def get_account(
        self, db: AsyncSession, owner_id: str
    ) -> LedgerAccount | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"owner_id": owner_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def apply_credit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        tx_type: str,
        description: str,
        reference_id: str | None,
    ) -> tuple[LedgerAccount, Transaction]:
        result = await db.execute(_CREDIT_SQL, {"owner_id": owner_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger upsert returned no rows")
        account = _row_to_account(row)
        tx = await self._insert_tx(
            db, owner_id, tx_type, amount, account.balance, description, reference_id
        )
        return account, tx

    async def apply_debit(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        description: str,
        reference_id: str | None,
    ) -> tuple[LedgerAccount, Transaction]:
        result = await db.execute(_DEBIT_SQL, {"owner_id": owner_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            acc_result = await db.execute(_GET_ACCOUNT_SQL, {"owner_id": owner_id})
            acc_row = acc_result.fetchone()
            available = Decimal(acc_row.balance) if acc_row else ZERO
            raise InsufficientBalanceError(amount, available)
        account = _row_to_account(row)
        tx = await self._insert_tx(
            db,
            owner_id,
            TransactionType.BILLING,
            -amount,
            account.balance,
            description,
            reference_id,
        )
        return account, tx

    async def list_transactions(
        self,
        db: AsyncSession,
        owner_id: str,
        limit: int | None,
        oldest_first: bool,
    ) -> list[Transaction]:
        sql = _LIST_TX_OLDEST_SQL if oldest_first else _LIST_TX_NEWEST_SQL
        # LIMIT NULL means no limit in PostgreSQL
        result = await db.execute(sql, {"owner_id": owner_id, "limit": limit})
        return [_row_to_tx(row) for row in result.fetchall()]

    async def _insert_tx(
        self,
        db: AsyncSession,
        owner_id: str,
        tx_type: str,
        amount: Decimal,
        balance_after: Decimal,
        description: str,
        reference_id: str | None,
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "owner_id": owner_id,
                "tx_type": TransactionType(tx_type).value,
                "amount": amount,
                "balance_after": balance_after,
                "description": description,
                "reference_id": reference_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger transaction insert returned no rows")
        tx = _row_to_tx(row)
        logger.info(
            "Ledger %s owner=%s amount=%s balance_after=%s tx=%s",
            tx.tx_type, owner_id, amount, balance_after, tx.id,
        )
        return tx
