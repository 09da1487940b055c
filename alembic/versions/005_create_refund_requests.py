"""005: create refund_requests table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE refund_requests (
            id                  BIGSERIAL       PRIMARY KEY,
            owner_id            VARCHAR(64)     NOT NULL,
            amount_requested    NUMERIC(12, 2)  NOT NULL,
            fee_percent         NUMERIC(5, 2)   NOT NULL,
            fee_amount          NUMERIC(12, 2)  NOT NULL,
            net_payout          NUMERIC(12, 2)  NOT NULL,
            payout_channel_id   VARCHAR(100)    NOT NULL,
            reason              VARCHAR(500),
            status              VARCHAR(10)     NOT NULL DEFAULT 'PENDING',
            admin_note          VARCHAR(500),
            payout_reference    VARCHAR(100),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT clock_timestamp(),
            processed_at        TIMESTAMPTZ,
            CONSTRAINT ck_refund_status CHECK (
                status IN ('PENDING', 'APPROVED', 'PROCESSED', 'REJECTED')
            ),
            CONSTRAINT ck_refund_amount_gt_0 CHECK (amount_requested > 0),
            CONSTRAINT ck_refund_net_gt_0 CHECK (net_payout > 0),
            CONSTRAINT ck_refund_net_eq CHECK (net_payout = amount_requested - fee_amount)
        );
    """)
    op.execute("""
        CREATE UNIQUE INDEX uq_refund_requests_one_pending
            ON refund_requests (owner_id) WHERE status = 'PENDING';
    """)
    op.execute("CREATE INDEX idx_refund_requests_status ON refund_requests (status, created_at);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS refund_requests CASCADE;")
