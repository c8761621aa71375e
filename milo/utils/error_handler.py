"""Error handling utilities and custom exceptions."""

from __future__ import annotations

from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from ..models.enums import GatewayErrorKind, RequestErrorKind


GENERIC_UNAVAILABLE_MESSAGE = (
    "Milo is having trouble responding right now. Please try again in a moment."
)


class MiloError(Exception):
    """Base class for every error raised by the chat pipeline."""

    pass


class RequestError(MiloError):
    """Raised when a chat request body fails validation."""

    def __init__(self, kind: RequestErrorKind, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.index = index


class GatewayError(MiloError):
    """Raised when the completion provider can not produce a reply."""

    def __init__(self, kind: GatewayErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def status_code(self) -> int:
        if self.kind == GatewayErrorKind.EMPTY_COMPLETION:
            return status.HTTP_500_INTERNAL_SERVER_ERROR
        return status.HTTP_503_SERVICE_UNAVAILABLE


class StorageError(MiloError):
    """Raised when the conversations table can not be read or written."""

    pass


class QueryError(StorageError):
    """Raised when stored conversations can not be fetched for display."""

    pass


class DeliveryError(MiloError):
    """Raised when the e-mail provider rejects or fails a digest send."""

    pass


async def request_error_handler(request: Request, exc: RequestError) -> JSONResponse:
    """Convert a RequestError into an HTTP 400 response."""
    logger.warning("Rejected chat request ({}): {}", exc.kind.value, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc), "kind": exc.kind.value},
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Hide provider details from the visitor; they only go to the log."""
    logger.error("Completion gateway failed ({}): {}", exc.kind.value, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": GENERIC_UNAVAILABLE_MESSAGE},
    )


async def query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    """Convert a QueryError into a retryable HTTP 500 response."""
    logger.error("Conversation query failed: {}", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Failed to fetch conversations", "retryable": True},
    )


async def milo_error_handler(request: Request, exc: MiloError) -> JSONResponse:
    """Fallback for any other pipeline error."""
    logger.error("{} occurred: {}", type(exc).__name__, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )
