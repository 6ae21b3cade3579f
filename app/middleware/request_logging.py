"""Request logging middleware: one line per request with status and latency."""


import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.log import with_fields

logger = logging.getLogger("app.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an ID and logs method, path, status and duration.

    An incoming ``X-Request-ID`` is reused; otherwise one is generated. The ID
    is echoed on the response and stored on ``request.state.request_id``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        response.headers[REQUEST_ID_HEADER] = request_id
        log = with_fields(
            logger,
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        if response.status_code >= 500:
            log.error("Request failed")
        else:
            log.info("Request handled")
        return response
