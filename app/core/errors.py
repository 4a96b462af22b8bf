"""
Error taxonomy and the central error translator.

Services raise the typed errors below for failures they detect themselves.
Everything else (schema validation, duplicate keys, bad ObjectIds, token
errors, unexpected exceptions) is mapped here, so every error response has
the same shape:

    {"success": false, "error": "...", "errors": [...], "stack": "..."}

`errors` is present only for validation failures, `stack` only in development.
"""

import logging
import traceback
from typing import Dict, List, Optional

from bson.errors import InvalidId
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose import ExpiredSignatureError, JWTError
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings

logger = logging.getLogger(__name__)


# ============================================================
# ERROR TYPES
# ============================================================

class AppError(Exception):
    """Base class for errors that map to a fixed HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server Error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class MissingFields(ValidationFailed):
    default_message = "Please provide name, email, and password"


class InvalidEmailFormat(ValidationFailed):
    default_message = "Please provide a valid email address"


class WeakPassword(ValidationFailed):
    default_message = "Password must be at least 6 characters long"


class InvalidStudentFields(ValidationFailed):
    default_message = "Please provide a valid age and course for student registration"


class DuplicateEmail(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User with this email already exists"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class TokenInvalid(Unauthorized):
    default_message = "Not authorized, token failed"


class TokenExpired(Unauthorized):
    default_message = "Token has expired"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ServerError(AppError):
    pass


# ============================================================
# TRANSLATOR
# ============================================================

def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[str]] = None,
    exc: Optional[BaseException] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the uniform error body."""
    body = {"success": False, "error": message}
    if errors:
        body["errors"] = errors
    if exc is not None and get_settings().is_development:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _validation_messages(errors: list) -> List[str]:
    messages = []
    for err in errors:
        # Drop the "body" prefix FastAPI puts in front of request fields
        location = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(location)
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return messages


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.errors, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST, "Validation failed", _validation_messages(exc.errors()), exc
    )


async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST, "Validation failed", _validation_messages(exc.errors()), exc
    )


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "Duplicate field value entered", exc=exc)


async def invalid_id_handler(request: Request, exc: InvalidId) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "Resource not found", exc=exc)


async def jwt_error_handler(request: Request, exc: JWTError) -> JSONResponse:
    if isinstance(exc, ExpiredSignatureError):
        return error_response(status.HTTP_401_UNAUTHORIZED, TokenExpired.default_message, exc=exc)
    return error_response(status.HTTP_401_UNAUTHORIZED, TokenInvalid.default_message, exc=exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = ServerError(str(exc) if get_settings().is_development else None)
    return error_response(error.status_code, error.message, exc=exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(InvalidId, invalid_id_handler)
    app.add_exception_handler(JWTError, jwt_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
