"""Test helpers for authentication and common test operations.

Provides:
- Token minting for test authentication (HS256 with the configured secret)
- Header generation for test requests
- Envelope unwrapping for API responses
"""

import time
from uuid import UUID, uuid4

import jwt

from researchhub.config import get_settings

DEFAULT_EXPIRES_IN = 3600  # 1 hour


def email_for(user_id: UUID | str) -> str:
    """Deterministic, unique email for a test user."""
    return f"user-{user_id}@example.test"


def mint_test_token(
    user_id: UUID | str,
    email: str | None = None,
    expires_in: int = DEFAULT_EXPIRES_IN,
    issuer: str | None = None,
    audience: str | None = None,
    secret: str | None = None,
    **extra_claims,
) -> str:
    """Mint a signed test JWT.

    Args:
        user_id: The user ID to set as the `sub` claim.
        email: The `email` claim (defaults to email_for(user_id)).
        expires_in: Token validity in seconds from now.
        issuer: The `iss` claim value (defaults to AUTH_ISSUER).
        audience: The `aud` claim value (defaults to the first AUTH_AUDIENCE).
        secret: Signing secret (defaults to the configured secret).
        **extra_claims: Additional claims to include in the token.

    Returns:
        A signed JWT token string.
    """
    settings = get_settings()

    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "email": email if email is not None else email_for(user_id),
        "iss": issuer or settings.auth_issuer,
        "aud": audience or settings.audience_list[0],
        "iat": now,
        "exp": now + expires_in,
        **extra_claims,
    }

    return jwt.encode(payload, secret or settings.effective_auth_secret, algorithm="HS256")


def auth_headers(user_id: UUID | str, **token_kwargs) -> dict[str, str]:
    """Return headers dict with valid Authorization for the given user."""
    token = mint_test_token(user_id, **token_kwargs)
    return {"Authorization": f"Bearer {token}"}


def create_test_user_id() -> UUID:
    """Generate a random UUID for a test user."""
    return uuid4()
