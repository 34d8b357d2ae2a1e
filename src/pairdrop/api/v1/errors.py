"""Translation of relay failures into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pairdrop.core.errors import (
    BlobNotFoundError,
    InvalidIdentifierError,
    InvalidReferenceError,
    NoSuchConnectionError,
    PartnerBusyError,
    RelayError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[RelayError], int] = {
    InvalidIdentifierError: status.HTTP_400_BAD_REQUEST,
    PartnerBusyError: status.HTTP_409_CONFLICT,
    NoSuchConnectionError: status.HTTP_404_NOT_FOUND,
    InvalidReferenceError: status.HTTP_400_BAD_REQUEST,
    StorageFailureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    BlobNotFoundError: status.HTTP_404_NOT_FOUND,
}


def status_for(exc: RelayError) -> int:
    """Return the HTTP status code for a relay failure."""
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return status.HTTP_400_BAD_REQUEST


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render a protocol failure with its human-readable message."""
    code = status_for(exc)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the client."""
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the relay error handlers on ``app``."""
    app.add_exception_handler(RelayError, relay_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
