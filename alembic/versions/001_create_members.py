"""001: create members table and timestamp trigger function

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE members (
            id              VARCHAR(64)     PRIMARY KEY,
            display_name    VARCHAR(120)    NOT NULL,
            roll_number     VARCHAR(40),
            period          VARCHAR(40),
            group_name      VARCHAR(80),
            subgroup        VARCHAR(40),
            term            VARCHAR(20),
            cohort          VARCHAR(40),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_members_updated_at
            BEFORE UPDATE ON members
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE members IS 'Member profiles; the five container attributes scope print runs';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS members CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
