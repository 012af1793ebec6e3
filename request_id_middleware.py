"""FastAPI middleware that tags every request with an X-Request-ID and logs it.

The id (taken from the inbound header when a client or proxy already set one)
is bound into structlog contextvars together with the method and path, so
every log line written while the request runs can be correlated. One
``request completed`` line with status and duration is written per request.
"""
from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger(__name__)


class RequestIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:  # type: ignore[override]
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        clear_contextvars()
        bind_contextvars(request_id=request_id, method=request.method, path=request.url.path)
        request.state.request_id = request_id

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            logger.info(
                "request completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            # Contextvars must not leak into the next request on this worker
            clear_contextvars()

        response.headers[self.header_name] = request_id
        return response
