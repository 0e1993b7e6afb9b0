"""Bearer-token authentication for the API.

Provides:
- AuthMiddleware: verifies the token on every non-public request, mirrors the
  identity into the users table, and attaches a Viewer to request.state
- get_viewer: route dependency returning that Viewer

Failures never reach the routes; they are answered here with the standard
error envelope (401 for token problems, the ApiError's own status when user
bootstrap rejects the identity).
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from researchhub.auth.verifier import TokenVerifier
from researchhub.errors import ApiError, ApiErrorCode
from researchhub.logging import bind_request_context, get_logger
from researchhub.responses import error_response

logger = get_logger(__name__)

PUBLIC_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

BootstrapCallback = Callable[[UUID, dict[str, Any]], None]


@dataclass(frozen=True)
class Viewer:
    """The authenticated caller, taken from the token's sub and email claims."""

    user_id: UUID
    email: str


def extract_bearer_token(authorization: str | None) -> str:
    """Pull the token out of an Authorization header value.

    Raises:
        ApiError(E_UNAUTHENTICATED): Header missing, not a Bearer scheme, or empty.
    """
    if not authorization:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid authorization header format")
    return token


def _reject(error: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error_response(error.code, error.message),
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Authenticate every request outside PUBLIC_PATHS.

    Args:
        app: The ASGI application.
        verifier: Checks the token and returns its claims.
        bootstrap_callback: Called as (user_id, claims) after verification to
            create or refresh the user row. An ApiError it raises is returned
            to the client; any other exception becomes a 500.
    """

    def __init__(
        self,
        app: ASGIApp,
        verifier: TokenVerifier,
        bootstrap_callback: BootstrapCallback | None = None,
    ):
        super().__init__(app)
        self.verifier = verifier
        self.bootstrap_callback = bootstrap_callback

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        try:
            token = extract_bearer_token(request.headers.get("authorization"))
            claims = self.verifier.verify(token)
        except ApiError as e:
            logger.warning("auth_rejected", reason=e.message)
            return _reject(e)

        user_id = UUID(claims["sub"])

        if self.bootstrap_callback is not None:
            try:
                self.bootstrap_callback(user_id, claims)
            except ApiError as e:
                logger.warning("user_bootstrap_rejected", user_id=str(user_id), code=e.code.value)
                return _reject(e)
            except Exception:
                logger.exception("user_bootstrap_failed", user_id=str(user_id))
                return _reject(ApiError(ApiErrorCode.E_INTERNAL, "Internal server error"))

        request.state.viewer = Viewer(user_id=user_id, email=claims["email"])
        bind_request_context(user_id=str(user_id))

        return await call_next(request)


def get_viewer(request: Request) -> Viewer:
    """Route dependency for the authenticated viewer.

    Raises:
        ApiError(E_UNAUTHENTICATED): No viewer on the request (public path or
            middleware not installed).
    """
    viewer = getattr(request.state, "viewer", None)
    if viewer is None:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return viewer
