"""Bearer token verification.

Tokens are HS256 JWTs minted by the sign-in frontend with the shared
AUTH_SECRET. The API only verifies them; it never issues tokens.
"""

from typing import Any, Protocol
from uuid import UUID

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
)

from researchhub.errors import ApiError, ApiErrorCode
from researchhub.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"
CLOCK_SKEW_SECONDS = 60
REQUIRED_CLAIMS = ["exp", "iss", "sub"]

# Checked in order; subclasses must come before InvalidTokenError.
_FAILURE_MESSAGES: list[tuple[type[InvalidTokenError], str]] = [
    (ExpiredSignatureError, "Token expired"),
    (InvalidSignatureError, "Invalid token signature"),
    (InvalidIssuerError, "Invalid token issuer"),
    (InvalidAudienceError, "Invalid token audience"),
    (DecodeError, "Invalid token format"),
    (InvalidTokenError, "Invalid token"),
]


class TokenVerifier(Protocol):
    def verify(self, token: str) -> dict[str, Any]:
        """Return the token's claims.

        Raises:
            ApiError(E_UNAUTHENTICATED): Token is invalid, expired, or malformed.
        """
        ...


def _unauthenticated(message: str) -> ApiError:
    return ApiError(ApiErrorCode.E_UNAUTHENTICATED, message)


class SharedSecretVerifier:
    """Verify HS256 tokens signed with the shared secret.

    Beyond the signature, a token must carry exp (60s skew allowed), the
    configured iss, one of the configured audiences, a UUID sub and a
    non-empty email.
    """

    def __init__(self, secret: str, issuer: str, audiences: list[str]):
        self.secret = secret
        self.issuer = issuer
        self.audiences = audiences

    def verify(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                audience=self.audiences,
                issuer=self.issuer,
                leeway=CLOCK_SKEW_SECONDS,
                options={"require": REQUIRED_CLAIMS},
            )
        except InvalidTokenError as e:
            message = next(msg for exc_type, msg in _FAILURE_MESSAGES if isinstance(e, exc_type))
            logger.warning("token_rejected", reason=message, error=str(e))
            raise _unauthenticated(message) from e

        try:
            UUID(str(claims["sub"]))
        except ValueError as e:
            logger.warning("token_rejected", reason="sub_not_uuid")
            raise _unauthenticated("Invalid token: sub is not a valid UUID") from e

        if not claims.get("email"):
            logger.warning("token_rejected", reason="missing_email")
            raise _unauthenticated("Invalid token: missing email")

        return claims
