"""002: create ledger_accounts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_accounts (
            owner_id        VARCHAR(64)     PRIMARY KEY,
            balance         NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            version         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_accounts_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_accounts_updated_at
            BEFORE UPDATE ON ledger_accounts
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE ledger_accounts IS 'Prepaid member balances, currency units with 2 decimals';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_accounts CASCADE;")
