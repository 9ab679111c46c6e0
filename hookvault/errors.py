"""Error taxonomy and structured error responses."""
from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger()


class HookVaultError(Exception):
    """Base class for every rejection the service reports to callers."""

    code = "HookVaultError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidJson(HookVaultError):
    code = "InvalidJson"
    status_code = 400


class NotObject(HookVaultError):
    code = "NotObject"
    status_code = 400


class NestedValue(HookVaultError):
    code = "NestedValue"
    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidNamespace(HookVaultError):
    code = "InvalidNamespace"
    status_code = 400


class PayloadTooLarge(HookVaultError):
    code = "PayloadTooLarge"
    status_code = 413

    def __init__(self, size: int, max_size: int):
        super().__init__(f"Request payload exceeds maximum size of {max_size} bytes")
        self.size = size
        self.max_size = max_size


class ForbiddenNamespace(HookVaultError):
    code = "ForbiddenNamespace"
    status_code = 403

    def __init__(self, namespace: str):
        super().__init__("Forbidden namespace")
        self.namespace = namespace


class StoreUnavailable(HookVaultError):
    """Any failure reported by the key-value backend."""

    code = "StoreUnavailable"
    status_code = 503


def _correlation_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def _error_body(request: Request, error: str, message) -> dict:
    return {
        "error": error,
        "message": message,
        "correlation_id": _correlation_id(),
        "path": str(request.url.path),
    }


async def handle_hookvault_error(request: Request, exc: HookVaultError) -> JSONResponse:
    log_method = log.error if exc.status_code >= 500 else log.warning
    log_method(
        "request.rejected",
        error=exc.code,
        detail=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )
    content = _error_body(request, exc.code, exc.message)
    if isinstance(exc, PayloadTooLarge):
        content["max_size"] = exc.max_size
        content["received_size"] = exc.size
    return JSONResponse(status_code=exc.status_code, content=content)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    log.warning("http.exception", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
    error = "".join(HTTPStatus(exc.status_code).phrase.split())
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, error, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.warning("request.invalid", errors=len(exc.errors()), path=request.url.path)
    content = _error_body(request, "ValidationError", "Request failed validation")
    content["details"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=422, content=content)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "unhandled.exception",
        error=str(exc),
        error_type=exc.__class__.__name__,
        path=request.url.path,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "InternalServerError", "An unexpected error occurred"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HookVaultError, handle_hookvault_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
