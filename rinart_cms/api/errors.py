"""Exception handlers that render every error as ``{"error": message}``."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)

DEFAULT_MESSAGES = {
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_404_NOT_FOUND: "Not found",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal server error",
}


def error_response(status_code: int, message: str | None = None, headers: dict[str, str] | None = None) -> JSONResponse:
    body = {"error": message or DEFAULT_MESSAGES.get(status_code, "Request failed")}
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else None
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = DEFAULT_MESSAGES[status.HTTP_404_NOT_FOUND]
    return error_response(exc.status_code, message, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.info("http.validation_failed", path=request.url.path, errors=len(errors))
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        f"{location}: {message}" if location else message,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("http.unhandled_error", path=request.url.path, method=request.method)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
