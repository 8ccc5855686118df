"""
Correlation ID Middleware

Tags every request with an X-Correlation-Id (the caller's, or a fresh
one) and writes a single access line when the response is ready.
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ...utils.logger import set_correlation_id, get_logger
from ...utils.idgen import generate_correlation_id

CORRELATION_HEADER = "X-Correlation-Id"

access_logger = get_logger("helpdesk.request")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Correlation id propagation and per-request access logging"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        set_correlation_id(correlation_id)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        access_logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms}ms",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            }
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
