"""bp_refund REST API — member withdrawal requests, operator approval queue."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.database import get_db_session
from src.bp_common.response import ApiResponse, success_response
from src.bp_member.api.dependencies import get_current_member, require_operator
from src.bp_member.domain.models import MemberProfile
from src.bp_refund.application.schemas import (
    ApproveRefundRequest,
    CreateRefundRequest,
    RejectRefundRequest,
)
from src.bp_refund.application.service import RefundService

router = APIRouter(prefix="/refunds", tags=["refunds"])

_service = RefundService()


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_refund_request(
    body: CreateRefundRequest,
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.request(
        db, member.id, body.amount, body.payout_channel_id, body.reason
    )
    return _respond(request, data.model_dump(mode="json"))


@router.get("/mine")
async def list_my_refunds(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_by_member(db, member.id)
    return _respond(request, data.model_dump(mode="json"))


@router.get("/pending", dependencies=[Depends(require_operator)])
async def list_pending_refunds(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_pending(db)
    return _respond(request, data.model_dump(mode="json"))


@router.post("/{request_id}/approve", dependencies=[Depends(require_operator)])
async def approve_refund(
    body: ApproveRefundRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    request_id: int = Path(..., ge=1),
) -> ApiResponse:
    data = await _service.approve(db, request_id, body.payout_reference, body.note)
    return _respond(request, data.model_dump(mode="json"))


@router.post("/{request_id}/reject", dependencies=[Depends(require_operator)])
async def reject_refund(
    body: RejectRefundRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    request_id: int = Path(..., ge=1),
) -> ApiResponse:
    data = await _service.reject(db, request_id, body.note)
    return _respond(request, data.model_dump(mode="json"))
