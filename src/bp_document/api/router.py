"""bp_document REST API — member uploads, listing, deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bp_common.database import get_db_session
from src.bp_common.enums import PrintMode
from src.bp_common.response import ApiResponse, success_response
from src.bp_document.application.service import DocumentService
from src.bp_document.domain.models import UploadedFile
from src.bp_member.api.dependencies import get_current_member
from src.bp_member.domain.models import MemberProfile

router = APIRouter(prefix="/documents", tags=["documents"])

_service = DocumentService()


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def upload_document(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    file: UploadFile = File(...),
    copy_count: int = Form(1),
    print_mode: PrintMode = Form(PrintMode.SIMPLEX),
) -> ApiResponse:
    upload = UploadedFile(
        filename=file.filename,
        content_type=file.content_type,
        # one byte past the limit is enough for the size check to reject
        data=await file.read(settings.MAX_UPLOAD_BYTES + 1),
    )
    data = await _service.submit(db, upload, member, copy_count, print_mode)
    return _respond(request, data.model_dump(mode="json"))


@router.get("/mine")
async def list_my_documents(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_member_documents(db, member.id)
    return _respond(request, data.model_dump(mode="json"))


@router.delete("/{document_id}")
async def delete_document(
    member: Annotated[MemberProfile, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    document_id: int = Path(..., ge=1),
) -> ApiResponse:
    data = await _service.delete_pending(db, document_id, member.id)
    return _respond(request, data.model_dump(mode="json"))
