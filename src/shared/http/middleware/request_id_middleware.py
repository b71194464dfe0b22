"""
Request ID Middleware
Adds unique request ID for log correlation
"""
from __future__ import annotations

import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.shared.infrastructure.observability.logger import bind_context, clear_context, get_logger

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Ensures every request is tagged with a stable correlation id.

    Generates or extracts X-Request-ID header and binds it to logging context
    as ``trace_id``. Also measures request duration and adds it to response
    headers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        bind_context(
            trace_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start_time = time.perf_counter()

        try:
            response = await call_next(request)

            duration_ms = int((time.perf_counter() - start_time) * 1000)
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"

            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            return response
        except Exception:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error("Request failed", duration_ms=duration_ms, exc_info=True)
            raise
        finally:
            clear_context()
