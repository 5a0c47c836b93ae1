"""
Domain errors and their HTTP rendering.

Every precondition failure in the API is raised as one of the
HirelyError subclasses below. The handlers registered by
``register_exception_handlers`` turn them into the JSON envelope the
frontend expects:

    {"status": "fail", "message": "Job not found."}

``status`` is "fail" for 4xx and "error" for 5xx. Anything that is not a
HirelyError is logged with its traceback and rendered as a generic 500.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong on the server!"


class HirelyError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HirelyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class Unauthenticated(HirelyError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required to access this resource."


class Forbidden(HirelyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to perform this action."


class NotFound(HirelyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class Conflict(HirelyError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."


class InternalError(HirelyError):
    pass


def error_body(status_code: int, message: str) -> dict:
    return {
        "status": "fail" if 400 <= status_code < 500 else "error",
        "message": message,
    }


async def hirely_error_handler(request: Request, exc: HirelyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        message = GENERIC_ERROR_MESSAGE
    else:
        message = exc.message
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.status_code, message))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as a 400 with the first problem."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = ValidationError.default_message
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, message),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Can't find {request.url.path} on this server!"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HirelyError, hirely_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
