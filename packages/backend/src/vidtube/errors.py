"""Error taxonomy and the JSON error envelope.

Learn: Services raise ApiError subclasses instead of HTTPException so
business logic stays independent of the web layer. register_error_handlers()
turns them (plus framework and database errors) into one uniform body:

    {"status_code": 404, "data": null, "message": "...",
     "success": false, "errors": []}
"""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class ApiError(Exception):
    """Base for every error that maps onto an HTTP status."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors or []
        self.headers = headers
        super().__init__(self.message)


class ValidationFailed(ApiError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized request"

    def __init__(self, message: Optional[str] = None, errors=None):
        super().__init__(message, errors, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ApiError):
    status_code = 500
    default_message = "Something went wrong"


def error_response(
    status_code: int,
    message: str,
    errors: Optional[list[Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "data": None,
            "message": message,
            "success": False,
            "errors": errors or [],
        },
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the envelope-producing handlers to the app."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("api.internal_error", path=request.url.path, message=exc.message)
        return error_response(exc.status_code, exc.message, exc.errors, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
            for e in exc.errors()
        ]
        return error_response(400, "Invalid input", errors)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        message = str(getattr(exc, "orig", exc)).lower()
        logger.warning("api.integrity_error", path=request.url.path, error=message)
        if "unique" in message or "duplicate" in message:
            return error_response(409, "Unique constraint violated")
        return error_response(400, "Integrity error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(
            exc.status_code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("api.unhandled_exception", path=request.url.path)
        return error_response(500, "An unexpected error occurred")
