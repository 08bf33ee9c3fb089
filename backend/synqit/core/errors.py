# synqit/core/errors.py
"""
Error types and the global exception handlers.

Every error leaves the API in the same envelope as successful responses:
    {"success": false, "message": "...", "errors": [...]}
"""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from synqit.config import settings

logger = logging.getLogger("uvicorn.error")


class AppError(Exception):
    """
    Domain error carrying the HTTP status it should be reported with.

    Raised by services for conditions such as "not found", "not authorized"
    or "duplicate request"; translated to a response by `app_error_handler`.
    """

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"AppError({self.status_code}, {self.message!r})"


def error_body(message: str, errors: list[dict[str, Any]] | None = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    items = []
    for err in exc.errors():
        # loc is ("body" | "query" | "path", field, ...); drop the source prefix
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        items.append({"field": field, "message": err.get("msg", "Invalid value")})
    return items


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation failed", _field_errors(exc)),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[error] unhandled exception on %s %s", request.method, request.url.path)
    # Don't leak internals outside development
    message = str(exc) if settings.env == "dev" else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(message or "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
