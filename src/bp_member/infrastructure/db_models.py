"""SQLAlchemy ORM model for the members table.

Table is created by Alembic migration: alembic/versions/001_create_members.py
Credentials live with the identity provider; this table only carries the
profile attributes the print pipeline needs.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.bp_common.database import Base


class MemberModel(Base):
    __tablename__ = "members"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    roll_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    period: Mapped[str | None] = mapped_column(String(40), nullable=True)
    group_name: Mapped[str | None] = mapped_column(String(80), nullable=True)
    subgroup: Mapped[str | None] = mapped_column(String(40), nullable=True)
    term: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cohort: Mapped[str | None] = mapped_column(String(40), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
