"""Error taxonomy shared by every route.

Each error maps to one HTTP status; the handlers registered in ``main``
render them into the response envelope.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskboard.responses import envelope
from taskboard.utils import format_error_message

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Access denied. No token provided."


class Forbidden(ApiError):
    status_code = 403
    default_message = "Not allowed"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Already exists"


class Internal(ApiError):
    status_code = 500


def describe_validation_errors(errors) -> str:
    """Render the first pydantic error as a single readable sentence."""
    if not errors:
        return "Invalid request"

    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    msg = first.get("msg", "is invalid")
    if loc:
        msg = f"{'.'.join(loc)}: {msg[:1].lower()}{msg[1:]}"
    return format_error_message(msg)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return envelope(exc.message, status_code=exc.status_code, ok=False)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return envelope(describe_validation_errors(exc.errors()), status_code=400, ok=False)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return envelope(Internal.default_message, status_code=500, ok=False)
