"""DocumentRepository — raw SQL persistence for document records.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.container import ContainerKey
from src.bp_common.enums import DocumentStatus, PrintMode
from src.bp_common.errors import InternalError
from src.bp_document.domain.models import DocumentRecord, PendingContainerSummary

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, owner_id, original_filename, storage_path,
    period, group_name, subgroup, term, cohort,
    byte_size, status, print_mode, copy_count,
    page_count, billed_page_count, total_cost, submitted_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO documents (owner_id, original_filename, storage_path,
        period, group_name, subgroup, term, cohort,
        byte_size, status, print_mode, copy_count,
        page_count, billed_page_count, total_cost)
    VALUES (:owner_id, :original_filename, :storage_path,
        :period, :group_name, :subgroup, :term, :cohort,
        :byte_size, :status, :print_mode, :copy_count,
        :page_count, :billed_page_count, :total_cost)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM documents WHERE id = :id")

_GET_BY_ID_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} FROM documents WHERE id = :id FOR UPDATE"
)

_LIST_PENDING_FOR_CONTAINER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM documents
    WHERE status = 'PENDING'
      AND period = :period AND group_name = :group_name AND subgroup = :subgroup
      AND term = :term AND cohort = :cohort
      AND (CAST(:print_mode AS TEXT) IS NULL OR print_mode = :print_mode)
    ORDER BY submitted_at ASC, id ASC
""")

_MARK_PROCESSED_SQL = text("""
    UPDATE documents
    SET status = 'PROCESSED', updated_at = NOW()
    WHERE id = ANY(:ids) AND status = 'PENDING'
""")

_DELETE_SQL = text("DELETE FROM documents WHERE id = :id")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM documents
    WHERE owner_id = :owner_id
    ORDER BY submitted_at DESC, id DESC
""")

_SUMMARIZE_PENDING_SQL = text("""
    SELECT period, group_name, subgroup, term, cohort, print_mode,
           COUNT(*)              AS document_count,
           SUM(copy_count)       AS total_copies,
           SUM(total_cost)       AS total_cost,
           MIN(submitted_at)     AS oldest_submitted_at
    FROM documents
    WHERE status = 'PENDING'
    GROUP BY period, group_name, subgroup, term, cohort, print_mode
    ORDER BY MIN(submitted_at) ASC
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _container_from_row(row: Any) -> ContainerKey:
    return ContainerKey(
        period=row.period,
        group=row.group_name,
        subgroup=row.subgroup,
        term=row.term,
        cohort=row.cohort,
    )


def _row_to_document(row: Any) -> DocumentRecord:
    return DocumentRecord(
        id=row.id,
        owner_id=row.owner_id,
        original_filename=row.original_filename,
        storage_path=row.storage_path,
        container=_container_from_row(row),
        byte_size=row.byte_size,
        status=row.status,
        print_mode=row.print_mode,
        copy_count=row.copy_count,
        page_count=row.page_count,
        billed_page_count=row.billed_page_count,
        total_cost=Decimal(row.total_cost),
        submitted_at=row.submitted_at,
    )


class DocumentRepository:
    async def insert(self, db: AsyncSession, record: DocumentRecord) -> DocumentRecord:
        container = record.container
        result = await db.execute(
            _INSERT_SQL,
            {
                "owner_id": record.owner_id,
                "original_filename": record.original_filename,
                "storage_path": record.storage_path,
                "period": container.period,
                "group_name": container.group,
                "subgroup": container.subgroup,
                "term": container.term,
                "cohort": container.cohort,
                "byte_size": record.byte_size,
                "status": DocumentStatus(record.status).value,
                "print_mode": PrintMode(record.print_mode).value,
                "copy_count": record.copy_count,
                "page_count": record.page_count,
                "billed_page_count": record.billed_page_count,
                "total_cost": record.total_cost,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Document insert returned no rows")
        return _row_to_document(row)

    async def get_by_id(
        self, db: AsyncSession, document_id: int, for_update: bool = False
    ) -> DocumentRecord | None:
        sql = _GET_BY_ID_FOR_UPDATE_SQL if for_update else _GET_BY_ID_SQL
        result = await db.execute(sql, {"id": document_id})
        row = result.fetchone()
        return _row_to_document(row) if row else None

    async def list_pending_for_container(
        self,
        db: AsyncSession,
        container: ContainerKey,
        print_mode: PrintMode | None = None,
    ) -> list[DocumentRecord]:
        result = await db.execute(
            _LIST_PENDING_FOR_CONTAINER_SQL,
            {
                "period": container.period,
                "group_name": container.group,
                "subgroup": container.subgroup,
                "term": container.term,
                "cohort": container.cohort,
                "print_mode": PrintMode(print_mode).value if print_mode else None,
            },
        )
        return [_row_to_document(row) for row in result.fetchall()]

    async def mark_processed(self, db: AsyncSession, document_ids: list[int]) -> int:
        if not document_ids:
            return 0
        result = await db.execute(_MARK_PROCESSED_SQL, {"ids": list(document_ids)})
        changed = result.rowcount  # type: ignore[attr-defined]
        logger.info("Marked %d of %d documents PROCESSED", changed, len(document_ids))
        return changed

    async def delete(self, db: AsyncSession, document_id: int) -> None:
        await db.execute(_DELETE_SQL, {"id": document_id})

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[DocumentRecord]:
        result = await db.execute(_LIST_BY_OWNER_SQL, {"owner_id": owner_id})
        return [_row_to_document(row) for row in result.fetchall()]

    async def summarize_pending(self, db: AsyncSession) -> list[PendingContainerSummary]:
        result = await db.execute(_SUMMARIZE_PENDING_SQL)
        return [
            PendingContainerSummary(
                container=_container_from_row(row),
                print_mode=row.print_mode,
                document_count=int(row.document_count),
                total_copies=int(row.total_copies),
                total_cost=Decimal(row.total_cost),
                oldest_submitted_at=row.oldest_submitted_at,
            )
            for row in result.fetchall()
        ]
