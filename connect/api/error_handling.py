"""
Exception handlers that render every failure as a stable JSON error.

Body shape: {"error": {"message", "code", "status", "details"}}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from connect.core.errors import BadRequestError, ConnectError, InternalError

logger = logging.getLogger(__name__)

# Stable messages for invalid request fields
_FIELD_MESSAGES = {
    "username": "Username is invalid. Please try again.",
    "email": "Email is invalid. Please try again.",
    "password": "Password must be contain 6 to 32 characters long. Please try again.",
    "code": "Code must be exactly 6 digits. Please try again.",
    "id": "Verification id is invalid. Please verify your email first.",
}


def _error_response(exc: ConnectError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def validation_error_to_bad_request(exc: RequestValidationError) -> BadRequestError:
    """Map the first failing field to its stable message."""
    errors = exc.errors()
    if not errors:
        return BadRequestError()

    loc = errors[0].get("loc", ())
    field = loc[-1] if loc else None
    message = _FIELD_MESSAGES.get(field, "Bad Request")
    return BadRequestError(message, details={"field": field} if field else None)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for domain errors, validation errors and anything unexpected."""

    @app.exception_handler(ConnectError)
    async def handle_connect_error(request: Request, exc: ConnectError):
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        error = validation_error_to_bad_request(exc)
        logger.info(f"{request.method} {request.url.path} -> 400 invalid request ({error.details})")
        return _error_response(error)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(InternalError())
