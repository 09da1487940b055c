"""004: create documents table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE documents (
            id                  BIGSERIAL       PRIMARY KEY,
            owner_id            VARCHAR(64)     NOT NULL,
            original_filename   VARCHAR(255)    NOT NULL,
            storage_path        VARCHAR(512)    NOT NULL,
            period              VARCHAR(40)     NOT NULL,
            group_name          VARCHAR(80)     NOT NULL,
            subgroup            VARCHAR(40)     NOT NULL,
            term                VARCHAR(20)     NOT NULL,
            cohort              VARCHAR(40)     NOT NULL,
            byte_size           BIGINT          NOT NULL,
            status              VARCHAR(10)     NOT NULL DEFAULT 'PENDING',
            print_mode          VARCHAR(10)     NOT NULL,
            copy_count          INT             NOT NULL DEFAULT 1,
            page_count          INT             NOT NULL,
            billed_page_count   INT             NOT NULL,
            total_cost          NUMERIC(12, 2)  NOT NULL,
            submitted_at        TIMESTAMPTZ     NOT NULL DEFAULT clock_timestamp(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_documents_status CHECK (status IN ('PENDING', 'PROCESSED', 'DELETED')),
            CONSTRAINT ck_documents_print_mode CHECK (print_mode IN ('SIMPLEX', 'DUPLEX', 'COLOR')),
            CONSTRAINT ck_documents_copy_count CHECK (copy_count >= 1),
            CONSTRAINT ck_documents_page_count CHECK (page_count >= 1),
            CONSTRAINT ck_documents_billed_pages CHECK (billed_page_count >= page_count),
            CONSTRAINT ck_documents_total_cost CHECK (total_cost >= 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_documents_container_status
            ON documents (period, group_name, subgroup, term, cohort, status, submitted_at, id);
    """)
    op.execute("CREATE INDEX idx_documents_owner ON documents (owner_id, submitted_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_documents_updated_at
            BEFORE UPDATE ON documents
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS documents CASCADE;")
