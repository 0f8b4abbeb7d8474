"""
Error kinds raised by the service and their HTTP mapping.

Every failure that reaches a client carries one of the ``ErrorCode`` values
alongside a free-text detail, so callers can branch on ``code`` and never on
the message.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL = "INTERNAL"


class ServiceError(Exception):
    """Base class for failures that map onto an HTTP response."""

    code: ErrorCode = ErrorCode.INTERNAL
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error"
    body_key: str = "error"

    def __init__(self, detail: Optional[str] = None, *, status_code: Optional[int] = None):
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)

    def to_body(self) -> dict:
        return {self.body_key: self.detail, "code": self.code.value}


class InvalidArgument(ServiceError):
    code = ErrorCode.INVALID_ARGUMENT
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid argument"


class Unauthenticated(ServiceError):
    code = ErrorCode.UNAUTHENTICATED
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    body_key = "message"


class NotFound(ServiceError):
    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class StoreError(ServiceError):
    """A document-store call failed (network, permission, quota...)."""

    code = ErrorCode.INTERNAL
    default_detail = "Rating store unavailable"


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = InvalidArgument(_format_validation_error(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_body())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = ServiceError()
    return JSONResponse(status_code=error.status_code, content=error.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
