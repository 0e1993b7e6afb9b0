"""Response envelopes and exception handlers.

Every response body is one of:
    {"data": ...}
    {"error": {"code": "E_...", "message": "...", "request_id": "..."}}

request_id is filled from the logging context whenever a request is in flight.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from researchhub.errors import ApiError, ApiErrorCode
from researchhub.logging import get_logger, get_request_id

logger = get_logger(__name__)

# Framework-raised HTTP errors mapped onto our codes
_HTTP_STATUS_CODES: dict[int, ApiErrorCode] = {
    400: ApiErrorCode.E_INVALID_REQUEST,
    401: ApiErrorCode.E_UNAUTHENTICATED,
    403: ApiErrorCode.E_FORBIDDEN,
    404: ApiErrorCode.E_NOT_FOUND,
    405: ApiErrorCode.E_INVALID_REQUEST,
    413: ApiErrorCode.E_FILE_TOO_LARGE,
    422: ApiErrorCode.E_INVALID_REQUEST,
}


def success_response(data: Any) -> dict[str, Any]:
    return {"data": data}


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Build the error envelope.

    Args:
        code: The error code.
        message: Client-safe message.
        request_id: Correlation ID; taken from the logging context when omitted.
    """
    error: dict[str, Any] = {"code": code.value, "message": message}
    request_id = request_id or get_request_id()
    if request_id:
        error["request_id"] = request_id
    return {"error": error}


def _json_error(status_code: int, code: ApiErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_response(code, message))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("api_error", code=exc.code.value, message=exc.message)
    return _json_error(exc.status_code, exc.code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_STATUS_CODES.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    return _json_error(exc.status_code, code, str(exc.detail or "An error occurred"))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject bad path/query/body input with 400 rather than FastAPI's 422."""
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.info("request_validation_failed", fields=fields)
    return _json_error(400, ApiErrorCode.E_INVALID_REQUEST, "Invalid request")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the exception server-side and answer 500 without leaking details."""
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    return _json_error(500, ApiErrorCode.E_INTERNAL, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
