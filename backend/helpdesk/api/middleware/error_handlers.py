"""
Error Handlers

Translate exceptions into JSON responses at the request boundary.
Every error body has the shape {"error": {"code", "message", "details"}}.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from ...domain.errors import DomainError, InternalFailureError, ValidationError
from ...utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)


def _error_response(
    error: DomainError,
    extra_headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    headers = {"X-Correlation-Id": get_correlation_id() or ""}
    headers.update(extra_headers or {})
    return JSONResponse(
        status_code=error.http_status,
        content=jsonable_encoder(error.to_dict()),
        headers=headers
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Expected failures raised by services: bad credentials, forbidden
    roles, missing tickets and so on.
    """
    if exc.http_status >= 500:
        logger.error(f"Domain failure: {exc.error_code} - {exc.message}", exc_info=exc)
    else:
        logger.warning(
            f"{request.method} {request.url.path} -> {exc.http_status} {exc.error_code}: {exc.message}",
            extra={"error_code": exc.error_code, "path": request.url.path}
        )

    extra_headers = None
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        extra_headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc, extra_headers)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request body, path or query did not match the schema"""
    errors: Any = jsonable_encoder(exc.errors())
    logger.warning(
        f"{request.method} {request.url.path} -> 400 schema violation ({len(errors)} errors)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path}
    )
    return _error_response(ValidationError("Request validation failed", details={"errors": errors}))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected. The trace is logged; the caller gets a generic 500."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"error_code": InternalFailureError.error_code, "path": request.url.path}
    )
    return _error_response(InternalFailureError("An unexpected error occurred"))


def register_error_handlers(app: FastAPI) -> None:
    """Attach the handlers above to the application"""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
