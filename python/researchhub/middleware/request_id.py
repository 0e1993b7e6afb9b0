"""X-Request-ID middleware for request correlation and access logging.

Every response carries an X-Request-ID header. A client-supplied ID is kept
when it is a UUID (normalized to lowercase) or a short token of letters,
digits, dots, dashes and underscores; anything else is replaced with a fresh
UUID4.

Middleware Ordering:
    Add this middleware LAST so it runs FIRST. Auth failures and unhandled
    errors then still carry the request ID and get an access log line.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from researchhub.logging import bind_request_context, clear_request_context, get_logger

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Return the request ID to use for a request.

    Args:
        incoming: Raw X-Request-ID header value, if present.

    Returns:
        The normalized incoming ID when valid, otherwise a new UUID4 string.
    """
    if not incoming or len(incoming.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return str(uuid.uuid4())

    try:
        return str(uuid.UUID(incoming)) if len(incoming) == 36 else _token_or_new(incoming)
    except ValueError:
        return _token_or_new(incoming)


def _token_or_new(value: str) -> str:
    if _TOKEN_PATTERN.match(value):
        return value
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns request IDs, sets logging context and logs one line per request.

    Args:
        app: The ASGI application.
        log_requests: If True, emit a request_completed entry per request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        request.state.request_id = request_id
        bind_request_context(request_id=request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                logger.info(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                )
            return response
        except Exception:
            logger.exception("request_failed")
            raise
        finally:
            clear_request_context()
