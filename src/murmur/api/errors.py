"""Error responses for the murmur HTTP API.

Every error is rendered as:

    {"success": false, "message": "..."}
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    success: bool = False
    message: str


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(self, status_code: int, message: str):
        self.message = message
        super().__init__(status_code=status_code, detail=message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(message=self.message)


class NotFoundError(ApiError):
    """Resource not found (404)."""

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(404, f"{resource_type} {identifier} not found")


class UnauthorizedError(ApiError):
    """Missing caller identity (401)."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(401, message)


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, message: str):
        super().__init__(400, message)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Exception handler for API errors."""
    return _error(exc.status_code, exc.message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 with the first problem."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error(400, message)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")
