"""FastAPI application factory.

create_app() wires:
- error handlers that render every failure in the error envelope
- AuthMiddleware, which verifies bearer tokens and bootstraps user rows
- the storage and parser clients, kept on app.state for route dependencies

Request-id middleware is added separately (add_request_id_middleware) so
entrypoints can install it last, making it the outermost layer.
"""

from uuid import UUID

from fastapi import FastAPI

from researchhub.api.routes import create_api_router
from researchhub.auth.middleware import AuthMiddleware, BootstrapCallback
from researchhub.auth.verifier import SharedSecretVerifier, TokenVerifier
from researchhub.config import get_settings
from researchhub.db.session import get_session_factory
from researchhub.logging import get_logger
from researchhub.middleware.request_id import RequestIDMiddleware
from researchhub.parser import ParserClient, get_parser_client
from researchhub.responses import register_exception_handlers
from researchhub.services.users import ensure_user
from researchhub.storage import StorageClientBase, get_storage_client

logger = get_logger(__name__)


def create_bootstrap_callback() -> BootstrapCallback:
    """User bootstrap that opens and closes its own session per request."""
    session_factory = get_session_factory()

    def bootstrap(user_id: UUID, claims: dict) -> None:
        with session_factory() as db:
            ensure_user(
                db,
                user_id,
                email=claims["email"],
                name=claims.get("name"),
                avatar_url=claims.get("picture"),
                provider=claims.get("provider"),
            )

    return bootstrap


def create_token_verifier() -> SharedSecretVerifier:
    settings = get_settings()
    return SharedSecretVerifier(
        secret=settings.effective_auth_secret,
        issuer=settings.auth_issuer,
        audiences=settings.audience_list,
    )


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier: TokenVerifier | None = None,
    bootstrap_callback: BootstrapCallback | None = None,
    storage_client: StorageClientBase | None = None,
    parser_client: ParserClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        skip_auth_middleware: Leave auth off (tests that exercise bare routes).
        token_verifier: Replaces the settings-based HS256 verifier.
        bootstrap_callback: Replaces the session-per-request user bootstrap.
        storage_client: Replaces the STORAGE_PATH-backed local storage.
        parser_client: Replaces the settings-based parser.
    """
    app = FastAPI(
        title="ResearchHub API",
        description="Research reports with deduplicated document uploads, parsing and tags",
        version="0.1.0",
    )

    app.state.storage_client = storage_client or get_storage_client()
    app.state.parser_client = parser_client or get_parser_client()

    register_exception_handlers(app)
    app.include_router(create_api_router())

    if not skip_auth_middleware:
        app.add_middleware(
            AuthMiddleware,
            verifier=token_verifier or create_token_verifier(),
            bootstrap_callback=bootstrap_callback or create_bootstrap_callback(),
        )
        logger.info("auth_middleware_enabled", env=get_settings().researchhub_env.value)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Install RequestIDMiddleware as the outermost middleware.

    Must be called after every other add_middleware() so auth failures and
    unhandled errors also carry X-Request-ID.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
