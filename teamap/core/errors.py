# teamap/core/errors.py
"""
Errores tipados de la API y los handlers globales que los convierten
en el sobre de error:

    {error, code, timestamp, path, method, details?}

Las rutas solo lanzan; nunca arman respuestas de error a mano.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamap.core.config import settings
from teamap.core.json import UTF8JSONResponse, utc_timestamp

log = logging.getLogger("uvicorn")


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(message)
        self.details = details or []


class AuthenticationError(AppError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication failed", code: str | None = None):
        super().__init__(message, code=code)


class AuthorizationError(AppError):
    status_code = 403
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message)


class RateLimitError(AppError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Too many requests"):
        super().__init__(message)


_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_ERROR",
    403: "AUTHORIZATION_ERROR",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT_EXCEEDED",
}


def error_body(
    request: Request,
    message: str,
    code: str,
    details: Any = None,
) -> dict:
    body = {
        "error": message,
        "code": code,
        "timestamp": utc_timestamp(),
        "path": request.url.path,
        "method": request.method,
    }
    if details:
        body["details"] = details
    return body


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: Any = None,
) -> UTF8JSONResponse:
    return UTF8JSONResponse(
        status_code=status_code,
        content=error_body(request, message, code, details),
    )


async def app_error_handler(request: Request, exc: AppError):
    return _error_response(
        request,
        exc.status_code,
        exc.message,
        exc.code,
        getattr(exc, "details", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        # loc = ("body", "title") | ("query", "limit") ...
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return _error_response(request, 400, "Validation failed", "VALIDATION_ERROR", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return _error_response(request, exc.status_code, str(exc.detail), code)


async def integrity_error_handler(request: Request, exc: IntegrityError):
    log.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error_response(
        request,
        409,
        "A record with this information already exists",
        "DUPLICATE_RECORD",
    )


async def no_result_handler(request: Request, exc: NoResultFound):
    return _error_response(request, 404, "Record not found", "NOT_FOUND")


async def unhandled_error_handler(request: Request, exc: Exception):
    log.error(
        "unhandled error on %s %s: %r",
        request.method,
        request.url.path,
        exc,
        exc_info=settings.is_development,
    )
    return _error_response(request, 500, "Internal Server Error", "INTERNAL_ERROR")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
