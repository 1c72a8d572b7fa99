"""Exception handlers rendering every failure as an error object.

Each handler answers with ``{"code", "message", "humanMessage"}`` and the
matching HTTP status. Unexpected exceptions are logged in full and reported
to the client only as a generic internal error.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..errors import InternalServerError, TaskServiceError, TaskValidationError

logger = logging.getLogger(__name__)


def _error_response(error: TaskServiceError) -> JSONResponse:
    return JSONResponse(status_code=error.code, content=error.to_error_object())


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Describe the first violated constraint as ``location: message``."""
    errors = exc.errors()
    if not errors:
        return "Validation error"
    first = errors[0]
    # Drop the "body"/"query"/"path" marker from the location
    location = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def handle_task_service_error(request: Request, exc: TaskServiceError) -> JSONResponse:
    """Format a domain or internal error raised by a route."""
    if exc.code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message} ({exc.human_message})")
    return _error_response(exc)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map FastAPI request validation failures to a validation error object."""
    error = TaskValidationError(_describe_validation_error(exc))
    logger.info(f"{request.method} {request.url.path} rejected: {error.human_message}")
    return _error_response(error)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Report any other exception as an internal error without its details."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(InternalServerError())


def register_error_handlers(app: FastAPI) -> None:
    """Install the error object handlers on a FastAPI application."""
    app.add_exception_handler(TaskServiceError, handle_task_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
