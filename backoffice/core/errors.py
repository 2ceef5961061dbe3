from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BackOfficeError(Exception):
    """Base class for failures that map onto an error envelope."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class PersistenceError(BackOfficeError):
    """A database write was rejected; the transaction has been rolled back."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "persistence_error"


class StockConflictError(BackOfficeError):
    """An ingredient changed underneath a read-modify-write."""

    status_code = status.HTTP_409_CONFLICT
    code = "stock_conflict"


class InsufficientStockError(BackOfficeError):
    status_code = status.HTTP_409_CONFLICT
    code = "insufficient_stock"


class MediaError(BackOfficeError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "media_error"


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str):
        message = detail
    else:
        message = "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def backoffice_exception_handler(request: Request, exc: BackOfficeError):
    if exc.status_code >= 500:
        logger.error("request.failed", extra={"extra_data": {"code": exc.code, "path": request.url.path}})
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def value_error_handler(request: Request, exc: ValueError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="invalid_request",
        message=str(exc),
    )
