"""
Exception translation.

Maps the domain exception hierarchy onto HTTP responses. Handlers are
registered once on the app; route code just raises.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    GatehouseError,
    NotFoundError,
    ValidationError,
)

from ..models.errors import ErrorResponse, FieldError, ValidationErrorResponse

logger = logging.getLogger(__name__)

# Checked in order; the first matching base wins.
STATUS_CODES: list[tuple[type[GatehouseError], int]] = [
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ExternalServiceError, 502),
]


def status_for(exc: GatehouseError) -> int:
    for base, status_code in STATUS_CODES:
        if isinstance(exc, base):
            return status_code
    return 500


async def gatehouse_error_handler(request: Request, exc: GatehouseError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    else:
        logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.code)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(
            loc=[str(part) for part in error.get("loc", ())],
            msg=str(error.get("msg", "")),
            type=str(error.get("type", "")),
        ).model_dump()
        for error in exc.errors()
    ]
    body = ValidationErrorResponse(details={"errors": errors})
    return JSONResponse(status_code=400, content=body.model_dump())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised errors (unknown route, wrong method) in the same envelope."""
    body = ErrorResponse(error=f"HTTP_{exc.status_code}", message=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


def _unhandled_error_handler(debug: bool):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        details = {"type": type(exc).__name__} if debug else {}
        body = ErrorResponse(error="INTERNAL_ERROR", message="Internal server error", details=details)
        return JSONResponse(status_code=500, content=body.model_dump())

    return handler


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Install all handlers on the app."""
    app.add_exception_handler(GatehouseError, gatehouse_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler(debug))
