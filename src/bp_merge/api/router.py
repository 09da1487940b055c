"""bp_merge REST API — operator-only merge, download, and processing endpoints."""

import re
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_common.database import get_db_session
from src.bp_common.enums import PrintMode
from src.bp_common.response import ApiResponse, success_response
from src.bp_merge.application.schemas import ContainerSelector
from src.bp_merge.application.service import MergeService
from src.bp_member.api.dependencies import require_operator

router = APIRouter(
    prefix="/merge", tags=["merge"], dependencies=[Depends(require_operator)]
)

_service = MergeService()

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


def _selector_from_query(
    period: str | None = Query(None),
    group: str | None = Query(None),
    subgroup: str | None = Query(None),
    term: str | None = Query(None),
    cohort: str | None = Query(None),
    print_mode: PrintMode | None = Query(None),
) -> ContainerSelector:
    return ContainerSelector(
        period=period, group=group, subgroup=subgroup,
        term=term, cohort=cohort, print_mode=print_mode,
    )


SelectorQuery = Annotated[ContainerSelector, Depends(_selector_from_query)]


@router.get("/containers")
async def list_pending_containers(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_pending_containers(db)
    return _respond(request, data.model_dump(mode="json"))


@router.post("")
async def merge_container(
    body: ContainerSelector,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.merge(db, body.to_key(), body.print_mode)
    return _respond(request, data.model_dump(mode="json"))


@router.get("/artifact")
async def download_artifact(selector: SelectorQuery) -> Response:
    key = selector.to_key()
    artifact = await _service.get_cached_artifact(key, selector.print_mode)
    filename = _UNSAFE_FILENAME.sub("_", key.cache_key(selector.print_mode))
    return Response(
        content=artifact,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )


@router.get("/failures")
async def get_failures(selector: SelectorQuery, request: Request) -> ApiResponse:
    data = await _service.get_failures(selector.to_key(), selector.print_mode)
    return _respond(request, data.model_dump(mode="json"))


@router.post("/mark-processed")
async def mark_processed(
    body: ContainerSelector,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.mark_container_processed(db, body.to_key(), body.print_mode)
    return _respond(request, data.model_dump(mode="json"))


@router.delete("/cache")
async def clear_cache(selector: SelectorQuery, request: Request) -> ApiResponse:
    data = await _service.clear_cached(selector.to_key(), selector.print_mode)
    return _respond(request, data.model_dump(mode="json"))


@router.get("/documents/{document_id}")
async def fetch_document(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    document_id: int = Path(..., ge=1),
) -> Response:
    record, data = await _service.fetch_document(db, document_id)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="document-{record.id}.pdf"'
        },
    )
