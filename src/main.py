"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.bp_common.database import engine, ping_database
from src.bp_common.errors import AppError
from src.bp_common.redis_client import close_redis, get_redis
from src.bp_common.response import error_response
from src.bp_document.api.router import router as document_router
from src.bp_gateway.middleware.request_log import RequestLogMiddleware
from src.bp_ledger.api.router import router as ledger_router
from src.bp_merge.api.router import router as merge_router
from src.bp_refund.api.router import router as refund_router

logger = logging.getLogger(__name__)

_VERSION = "0.1.0"


def _uses_redis() -> bool:
    return settings.MERGE_CACHE_BACKEND.lower() == "redis"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (and Redis when it backs the merge cache). Shutdown: dispose."""
    await ping_database()
    if _uses_redis():
        redis = await get_redis()
        await redis.ping()
    logger.info(
        "%s started: merge cache=%s, fetch workers=%d",
        settings.APP_NAME, settings.MERGE_CACHE_BACKEND, settings.MERGE_FETCH_WORKERS,
    )
    yield
    await engine.dispose()
    if _uses_redis():
        await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version=_VERSION,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(mode="json"),
    )


app.include_router(ledger_router, prefix="/api/v1")
app.include_router(document_router, prefix="/api/v1")
app.include_router(merge_router, prefix="/api/v1")
app.include_router(refund_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": _VERSION}
