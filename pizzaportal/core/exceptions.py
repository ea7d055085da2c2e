"""
Domain errors and the global exception handlers that turn them into
``{"error": ...}`` responses. Internal faults answer an empty 500.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class ServiceError(Exception):
    """Base for every error a service reports to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, **extra: Any) -> None:
        self.message = message or self.default_message
        self.extra: dict[str, Any] = extra
        super().__init__(self.message)

    def payload(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class BadRequest(ServiceError):
    default_message = "Missing required fields or fields are invalid"


class TokenExpired(BadRequest):
    default_message = "The token has already expired and cannot be extended"


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Password did not match the specified user's stored password"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Missing required token in header or token is invalid"


class InvalidToken(Forbidden):
    """Token missing, unknown, expired or bound to another email."""


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class PaymentFailed(ServiceError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Payment failed"


class InternalError(ServiceError):
    """Storage or gateway fault. The message is logged, never returned."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def payload(self) -> dict[str, Any]:
        return {}


class HashingFailed(InternalError):
    default_message = "Could not hash the user's password"


# ── Record store errors ─────────────────────────────────────────────
class StoreError(Exception):
    """Backend fault while reading or writing a record."""


class RecordNotFound(StoreError):
    def __init__(self, collection: str, key: str) -> None:
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}/{key} does not exist")


class RecordExists(StoreError):
    def __init__(self, collection: str, key: str) -> None:
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}/{key} already exists")


# ── Handlers ────────────────────────────────────────────────────────
async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Internal error: %s", exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


async def _store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Record store error: %s", exc, exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={})


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query")]
        fields.append({"field": ".".join(loc) or "body", "message": err.get("msg", "")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": BadRequest.default_message, "fields": fields},
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        content = {"error": "Invalid route"}
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        content = {"error": f"Invalid method: {request.method.lower()}"}
    elif exc.status_code >= 500:
        logger.error("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
        content = {}
    else:
        content = {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StoreError, _store_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
