"""Global error handler: consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from poketactix.errors import ErrorCode, GameError

logger = structlog.get_logger()

_HTTP_STATUS_CODES = {
    401: ErrorCode.INVALID_CREDENTIALS,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
}


def _code_for_status(status_code: int) -> ErrorCode:
    if status_code >= 500:
        return ErrorCode.INTERNAL
    return _HTTP_STATUS_CODES.get(status_code, ErrorCode.INVALID_REQUEST)


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
        """Map domain errors to their status code and stable error code."""
        if exc.status_code >= 500:
            logger.error(
                "game_error",
                path=request.url.path,
                code=exc.code.value,
                error=exc.message,
                exc_info=exc,
            )
        else:
            logger.info("request_rejected", path=request.url.path, code=exc.code.value, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.as_payload())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": _code_for_status(exc.status_code).value},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle validation errors with consistent JSON format."""
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Validation error",
                "code": ErrorCode.INVALID_REQUEST.value,
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "code": ErrorCode.INTERNAL.value},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors with non-serializable context (e.g. exceptions) stringified."""
    errors = []
    for err in exc.errors():
        item = dict(err)
        if "ctx" in item:
            item["ctx"] = {k: str(v) for k, v in item["ctx"].items()}
        errors.append(item)
    return errors
