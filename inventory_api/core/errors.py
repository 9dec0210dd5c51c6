from __future__ import annotations

import logging
import math
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_api.config import get_settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures that reach the client as a structured payload."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "internal_error"
    default_message = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        kind: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message or self.default_message
        if kind:
            self.kind = kind
        self.details = details or {}
        self.debug: Optional[str] = None
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.message,
            "kind": self.kind,
            "status": self.status_code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation_error"
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "authentication_error"
    default_message = "Not authenticated"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "authorization_error"
    default_message = "Access denied. Insufficient permissions."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"
    default_message = "Resource already exists"


class InsufficientStockError(AppError):
    status_code = status.HTTP_409_CONFLICT
    kind = "insufficient_stock"

    def __init__(self, *, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock. Available: {available}",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class RateLimitError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    kind = "rate_limited"
    default_message = "Too many requests from this IP, please try again later."

    def __init__(self, message: Optional[str] = None, *, retry_after: float):
        self.retry_after = max(1, math.ceil(retry_after))
        super().__init__(message, details={"retry_after_seconds": self.retry_after})


class DatastoreUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    kind = "datastore_unavailable"
    default_message = "Database connection failed"


class InternalError(AppError):
    pass


# PostgreSQL SQLSTATE codes
_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"
_PG_NOT_NULL_VIOLATION = "23502"
_PG_INVALID_TEXT_REPRESENTATION = "22P02"
_PG_NUMERIC_VALUE_OUT_OF_RANGE = "22003"


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return str(code)
    diag = getattr(orig, "diag", None)
    return getattr(diag, "sqlstate", None)


def translate_db_error(exc: SQLAlchemyError) -> AppError:
    """Map a datastore exception onto the client-facing error taxonomy."""
    if isinstance(exc, PoolTimeoutError):
        error: AppError = DatastoreUnavailableError(
            "Database is busy, please retry shortly"
        )
    elif isinstance(exc, DisconnectionError):
        error = DatastoreUnavailableError()
    elif isinstance(exc, DBAPIError):
        code = _sqlstate(exc)
        text = str(getattr(exc, "orig", exc)).lower()
        if code == _PG_UNIQUE_VIOLATION or "unique constraint" in text:
            error = ConflictError()
        elif code == _PG_FOREIGN_KEY_VIOLATION or "foreign key constraint" in text:
            error = ValidationError("Referenced resource does not exist")
        elif code == _PG_NOT_NULL_VIOLATION or "not null constraint" in text:
            error = ValidationError("Required field is missing")
        elif code == _PG_INVALID_TEXT_REPRESENTATION:
            error = ValidationError("Invalid data format")
        elif code == _PG_NUMERIC_VALUE_OUT_OF_RANGE or "out of range" in text:
            error = ValidationError("Numeric value out of range")
        elif isinstance(exc, IntegrityError):
            error = ValidationError("Request violates a data constraint")
        elif isinstance(exc, (OperationalError, InterfaceError)) or exc.connection_invalidated:
            error = DatastoreUnavailableError()
        else:
            error = InternalError("Database error occurred")
    else:
        error = InternalError("Database error occurred")
    error.debug = str(exc)
    return error


def _respond(request: Request, error: AppError) -> JSONResponse:
    payload = error.to_payload()
    if error.debug and not get_settings().is_production:
        payload["debug"] = error.debug
    response = JSONResponse(status_code=error.status_code, content=jsonable_encoder(payload))
    if isinstance(error, RateLimitError):
        response.headers["Retry-After"] = str(error.retry_after)
    return response


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _respond(request, exc)


async def handle_db_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    error = translate_db_error(exc)
    if error.status_code >= 500:
        logger.exception("Datastore error on %s %s", request.method, request.url.path)
    else:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, error.message)
    return _respond(request, error)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    messages = []
    for entry in errors:
        location = ".".join(str(part) for part in entry.get("loc", ()) if part != "body")
        messages.append(f"{location}: {entry.get('msg')}" if location else str(entry.get("msg")))
    error = ValidationError(", ".join(messages) or None, details={"errors": errors})
    return _respond(request, error)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        error: AppError = NotFoundError("Route not found", details={"path": request.url.path})
    else:
        error = AppError(str(exc.detail))
        error.status_code = exc.status_code
        error.kind = {
            400: ValidationError.kind,
            401: AuthenticationError.kind,
            403: AuthorizationError.kind,
            404: NotFoundError.kind,
            405: "method_not_allowed",
            409: ConflictError.kind,
        }.get(exc.status_code, "http_error")
    response = _respond(request, error)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InternalError()
    error.debug = repr(exc)
    return _respond(request, error)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(SQLAlchemyError, handle_db_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)


__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DatastoreUnavailableError",
    "InsufficientStockError",
    "InternalError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
    "register_error_handlers",
    "translate_db_error",
]
