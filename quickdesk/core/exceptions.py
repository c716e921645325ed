"""Domain errors and the JSON envelope they are rendered into.

Services raise these; routes never build error responses themselves. Every
error leaves the API as::

    {"success": false, "error": {"code": ..., "message": ..., "details": ...}}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    default_message: str = GENERIC_ERROR_MESSAGE

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Resource not found"

    def __init__(self, message: str | None = None, resource: str | None = None):
        super().__init__(message, details={"resource": resource} if resource else None)


class ValidationError(AppError):
    """Input that passed schema validation but breaks a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, field: str | None = None):
        super().__init__(message, details={"field": field} if field else None)


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_message = "Access denied"


class TicketAccessDenied(ForbiddenError):
    """The viewer is not the creator, the assigned agent or an admin.

    ``redirect_to`` tells the client where to send the user instead.
    """

    error_code = "TICKET_ACCESS_DENIED"
    default_message = "You don't have permission to view this ticket."

    def __init__(self, message: str | None = None, redirect_to: str = "/tickets"):
        super().__init__(message, details={"redirect_to": redirect_to})


def error_envelope(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or None},
    }


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.error_code,
        exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.error_code, exc.message, exc.details),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(AppError.error_code, GENERIC_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Install the envelope handlers. In debug mode unexpected errors keep their traceback."""
    app.add_exception_handler(AppError, handle_app_error)  # type: ignore[arg-type]
    if not debug:
        app.add_exception_handler(Exception, handle_unexpected_error)
