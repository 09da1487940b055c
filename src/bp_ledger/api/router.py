"""bp_ledger REST API — member balance/history, operator top-up."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.database import get_db_session
from src.bp_common.response import ApiResponse, success_response
from src.bp_ledger.application.schemas import TopupRequest
from src.bp_ledger.application.service import LedgerService
from src.bp_member.api.dependencies import get_current_member, require_operator
from src.bp_member.domain.models import MemberProfile

router = APIRouter(prefix="/ledger", tags=["ledger"])

_service = LedgerService()


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/balance")
async def get_balance(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, member.id)
    return _respond(request, data.model_dump(mode="json"))


@router.get("/transactions")
async def list_transactions(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int | None = Query(None, ge=1, le=500, description="Most recent N; omit for all"),
) -> ApiResponse:
    data = await _service.list_transactions(db, member.id, limit)
    return _respond(request, data.model_dump(mode="json"))


@router.get("/verify")
async def verify_ledger(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.verify_account(db, member.id)
    return _respond(request, data.model_dump(mode="json"))


@router.post("/topup", dependencies=[Depends(require_operator)])
async def topup(
    body: TopupRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.topup(
        db, body.owner_id, body.amount, body.reference_id, body.description
    )
    return _respond(request, data.model_dump(mode="json"))
