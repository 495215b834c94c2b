"""Translate domain exceptions into the JSON error envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from invoicedesk.auth.gate import rejection_response
from invoicedesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    InvalidTransitionError,
    InvoiceDeskError,
    NotFoundError,
    ValidationError,
)
from invoicedesk.schemas.common import ErrorEnvelope

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "authentication_required",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


def map_domain_error(exc: InvoiceDeskError) -> tuple[int, str]:
    if isinstance(exc, InvalidTransitionError):
        return 400, "invalid_transition"
    if isinstance(exc, ValidationError):
        return 400, "validation_error"
    if isinstance(exc, NotFoundError):
        return 404, "not_found"
    if isinstance(exc, ConflictError):
        return 409, "conflict"
    if isinstance(exc, AuthorizationError):
        return 403, "forbidden"
    if isinstance(exc, DatabaseError):
        return 503, "database_error"
    return 500, "internal_error"


def error_response(status_code: int, error_code: str, detail: str, **extra: object) -> JSONResponse:
    body = ErrorEnvelope(error_code=error_code, detail=detail).model_dump()
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


async def _domain_error_handler(request: Request, exc: InvoiceDeskError) -> JSONResponse:
    if isinstance(exc, AuthenticationError):
        if exc.reason == "invalid_credentials":
            return error_response(401, exc.reason, str(exc))
        return rejection_response(exc)
    status_code, error_code = map_domain_error(exc)
    if status_code == 500:
        logger.error(
            "api.error.unhandled_domain",
            extra={"event": "api.error.unhandled_domain", "path": request.url.path, "error": type(exc).__name__},
        )
        return error_response(status_code, error_code, "Internal error.")
    return error_response(status_code, error_code, str(exc))


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(
        "api.error.integrity",
        extra={"event": "api.error.integrity", "path": request.url.path},
    )
    return error_response(409, "conflict", "The request conflicts with existing data.")


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return error_response(400, "validation_error", "Request validation failed.", errors=errors)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    response = error_response(exc.status_code, error_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvoiceDeskError, _domain_error_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
