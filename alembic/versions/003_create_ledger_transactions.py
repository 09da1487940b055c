"""003: create ledger_transactions table (append-only)

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_transactions (
            id              BIGSERIAL       PRIMARY KEY,
            owner_id        VARCHAR(64)     NOT NULL,
            tx_type         VARCHAR(10)     NOT NULL,
            amount          NUMERIC(12, 2)  NOT NULL,
            balance_after   NUMERIC(12, 2)  NOT NULL,
            description     VARCHAR(500),
            reference_id    VARCHAR(100),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_tx_type CHECK (tx_type IN ('TOPUP', 'BILLING', 'REFUND')),
            CONSTRAINT ck_ledger_tx_sign CHECK (
                (tx_type = 'BILLING' AND amount < 0) OR (tx_type <> 'BILLING' AND amount > 0)
            ),
            CONSTRAINT ck_ledger_tx_balance_after_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_ledger_tx_owner_created ON ledger_transactions (owner_id, created_at, id);"
    )
    op.execute("CREATE INDEX idx_ledger_tx_reference ON ledger_transactions (reference_id);")
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_ledger_tx_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'ledger_transactions is append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_tx_no_update_delete
            BEFORE UPDATE OR DELETE ON ledger_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_ledger_tx_immutable();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_transactions CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_ledger_tx_immutable();")
