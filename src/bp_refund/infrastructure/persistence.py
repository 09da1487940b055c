"""RefundRepository — raw SQL persistence for refund requests.

The one-PENDING-per-owner rule is enforced by the partial unique index
uq_refund_requests_one_pending, so two concurrent requests cannot both land.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.enums import RefundStatus
from src.bp_common.errors import DuplicatePendingRefundError, InternalError, RefundNotFoundError
from src.bp_refund.domain.models import RefundRequest

_ONE_PENDING_INDEX = "uq_refund_requests_one_pending"

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, owner_id, amount_requested, fee_percent, fee_amount, net_payout,
    payout_channel_id, reason, status, admin_note, payout_reference,
    created_at, processed_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO refund_requests (owner_id, amount_requested, fee_percent,
        fee_amount, net_payout, payout_channel_id, reason, status)
    VALUES (:owner_id, :amount_requested, :fee_percent,
        :fee_amount, :net_payout, :payout_channel_id, :reason, :status)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM refund_requests WHERE id = :id")

_GET_BY_ID_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} FROM refund_requests WHERE id = :id FOR UPDATE"
)

_HAS_PENDING_SQL = text("""
    SELECT 1 FROM refund_requests
    WHERE owner_id = :owner_id AND status = 'PENDING'
    LIMIT 1
""")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE refund_requests
    SET status = :status,
        payout_reference = COALESCE(:payout_reference, payout_reference),
        admin_note = COALESCE(:admin_note, admin_note),
        processed_at = :processed_at
    WHERE id = :id
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_PENDING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM refund_requests
    WHERE status = 'PENDING'
    ORDER BY created_at ASC, id ASC
""")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM refund_requests
    WHERE owner_id = :owner_id
    ORDER BY created_at DESC, id DESC
""")


def _row_to_refund(row: Any) -> RefundRequest:
    return RefundRequest(
        id=row.id,
        owner_id=row.owner_id,
        amount_requested=Decimal(row.amount_requested),
        fee_percent=Decimal(row.fee_percent),
        fee_amount=Decimal(row.fee_amount),
        net_payout=Decimal(row.net_payout),
        payout_channel_id=row.payout_channel_id,
        reason=row.reason,
        status=row.status,
        admin_note=row.admin_note,
        payout_reference=row.payout_reference,
        created_at=row.created_at,
        processed_at=row.processed_at,
    )


class RefundRepository:
    async def insert(self, db: AsyncSession, request: RefundRequest) -> RefundRequest:
        try:
            result = await db.execute(
                _INSERT_SQL,
                {
                    "owner_id": request.owner_id,
                    "amount_requested": request.amount_requested,
                    "fee_percent": request.fee_percent,
                    "fee_amount": request.fee_amount,
                    "net_payout": request.net_payout,
                    "payout_channel_id": request.payout_channel_id,
                    "reason": request.reason,
                    "status": RefundStatus(request.status).value,
                },
            )
        except IntegrityError as e:
            if _ONE_PENDING_INDEX in str(e.orig):
                raise DuplicatePendingRefundError() from e
            raise
        row = result.fetchone()
        if row is None:
            raise InternalError("Refund request insert returned no rows")
        return _row_to_refund(row)

    async def get_by_id(
        self, db: AsyncSession, request_id: int, for_update: bool = False
    ) -> RefundRequest | None:
        sql = _GET_BY_ID_FOR_UPDATE_SQL if for_update else _GET_BY_ID_SQL
        result = await db.execute(sql, {"id": request_id})
        row = result.fetchone()
        return _row_to_refund(row) if row else None

    async def has_pending(self, db: AsyncSession, owner_id: str) -> bool:
        result = await db.execute(_HAS_PENDING_SQL, {"owner_id": owner_id})
        return result.fetchone() is not None

    async def update_status(
        self,
        db: AsyncSession,
        request_id: int,
        status: str,
        payout_reference: str | None,
        admin_note: str | None,
        processed_at: datetime | None,
    ) -> RefundRequest:
        result = await db.execute(
            _UPDATE_STATUS_SQL,
            {
                "id": request_id,
                "status": RefundStatus(status).value,
                "payout_reference": payout_reference,
                "admin_note": admin_note,
                "processed_at": processed_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise RefundNotFoundError(request_id)
        return _row_to_refund(row)

    async def list_pending(self, db: AsyncSession) -> list[RefundRequest]:
        result = await db.execute(_LIST_PENDING_SQL)
        return [_row_to_refund(row) for row in result.fetchall()]

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> list[RefundRequest]:
        result = await db.execute(_LIST_BY_OWNER_SQL, {"owner_id": owner_id})
        return [_row_to_refund(row) for row in result.fetchall()]
