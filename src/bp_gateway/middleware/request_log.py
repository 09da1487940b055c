"""Request logging middleware.

Assigns each request a short id (request.state.request_id, echoed back in
the X-Request-Id header and in every ApiResponse) and logs one line per
request with the caller role, status and latency.

Log format:
    INFO [POST] /api/v1/documents -> 201 (41ms) member=stu-17 req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("bp.request")


def _caller(request: Request) -> str:
    if request.headers.get("X-Operator-Token"):
        return "operator"
    member_id = request.headers.get("X-Member-Id")
    return f"member={member_id}" if member_id else "anonymous"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Id"] = request_id

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "[%s] %s -> %d (%.0fms) %s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            _caller(request),
            request_id,
        )
        return response
