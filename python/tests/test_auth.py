"""Tests for token verification, auth middleware and user bootstrap.

Tests the full auth flow including:
- HS256 token validation (signature, expiry, issuer, audience, claims)
- 401 responses for missing or malformed Authorization headers
- User bootstrap on first request and profile refresh on later ones
- GET /me endpoint
"""

from uuid import UUID, uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from researchhub.auth.verifier import SharedSecretVerifier
from researchhub.config import get_settings
from researchhub.db.models import User
from researchhub.errors import ApiError, ApiErrorCode
from tests.factories import create_test_user
from tests.helpers import auth_headers, email_for, mint_test_token

SECRET = "unit-test-secret"
ISSUER = "researchhub"
AUDIENCE = "researchhub-api"


@pytest.fixture
def verifier() -> SharedSecretVerifier:
    return SharedSecretVerifier(secret=SECRET, issuer=ISSUER, audiences=[AUDIENCE, "other-app"])


def _token(user_id=None, **kwargs) -> str:
    kwargs.setdefault("secret", SECRET)
    kwargs.setdefault("issuer", ISSUER)
    kwargs.setdefault("audience", AUDIENCE)
    return mint_test_token(user_id or uuid4(), **kwargs)


class TestSharedSecretVerifier:
    def test_valid_token(self, verifier):
        user_id = uuid4()

        claims = verifier.verify(_token(user_id))

        assert claims["sub"] == str(user_id)
        assert claims["email"] == email_for(user_id)

    def test_any_configured_audience_accepted(self, verifier):
        claims = verifier.verify(_token(audience="other-app"))

        assert claims["aud"] == "other-app"

    def test_small_clock_skew_tolerated(self, verifier):
        """Tokens expired by less than the leeway still verify."""
        claims = verifier.verify(_token(expires_in=-30))

        assert "sub" in claims

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"expires_in": -3600}, "Token expired"),
            ({"secret": "wrong-secret"}, "Invalid token signature"),
            ({"issuer": "someone-else"}, "Invalid token issuer"),
            ({"audience": "not-us"}, "Invalid token audience"),
        ],
    )
    def test_rejected_tokens(self, verifier, kwargs, message):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify(_token(**kwargs))

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert exc_info.value.message == message

    def test_garbage_token(self, verifier):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify("not.a.jwt")

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED

    def test_non_uuid_subject(self, verifier):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify(_token("user-123"))

        assert "sub" in exc_info.value.message

    def test_missing_email(self, verifier):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify(_token(email=""))

        assert "email" in exc_info.value.message


class TestAuthBoundary:
    """Unauthenticated requests are rejected before reaching routes."""

    def test_no_authorization_header(self, auth_client):
        response = auth_client.get("/me")

        assert response.status_code == 401
        data = response.json()
        assert data["error"]["code"] == "E_UNAUTHENTICATED"
        assert "authentication" in data["error"]["message"].lower()

    def test_wrong_authorization_format(self, auth_client):
        response = auth_client.get("/me", headers={"Authorization": "Basic abc123"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "E_UNAUTHENTICATED"

    def test_empty_bearer_token(self, auth_client):
        response = auth_client.get("/me", headers={"Authorization": "Bearer "})

        assert response.status_code == 401

    def test_bad_signature(self, auth_client, test_user_id):
        response = auth_client.get("/me", headers=auth_headers(test_user_id, secret="forged"))

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token signature"

    def test_expired_token(self, auth_client, test_user_id):
        response = auth_client.get("/me", headers=auth_headers(test_user_id, expires_in=-3600))

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Token expired"

    def test_401_carries_request_id(self, auth_client):
        response = auth_client.get("/reports")

        assert response.status_code == 401
        assert response.json()["error"]["request_id"] == response.headers["X-Request-ID"]

    def test_health_no_auth_required(self, auth_client):
        response = auth_client.get("/health")

        assert response.status_code == 200


class TestBootstrap:
    def test_first_request_creates_user(self, auth_client, db_session: Session, test_user_id):
        response = auth_client.get(
            "/me",
            headers=auth_headers(
                test_user_id, name="Ada", picture="https://img.example/ada.png", provider="github"
            ),
        )

        assert response.status_code == 200
        user = db_session.execute(select(User).where(User.id == test_user_id)).scalar_one()
        assert user.email == email_for(test_user_id)
        assert user.name == "Ada"
        assert user.avatar_url == "https://img.example/ada.png"
        assert user.provider == "github"

    def test_later_requests_refresh_profile(self, auth_client, db_session: Session, test_user_id):
        auth_client.get("/me", headers=auth_headers(test_user_id, name="Old Name"))
        auth_client.get("/me", headers=auth_headers(test_user_id, name="New Name"))

        users = db_session.execute(select(User).where(User.id == test_user_id)).scalars().all()
        assert len(users) == 1
        assert users[0].name == "New Name"

    def test_email_owned_by_other_user_is_conflict(self, auth_client, db_session: Session):
        """A token whose email already belongs to another account is rejected."""
        existing = create_test_user(db_session, email="taken@example.test")
        newcomer = uuid4()

        response = auth_client.get(
            "/me", headers=auth_headers(newcomer, email="taken@example.test")
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "E_EMAIL_TAKEN"
        assert db_session.get(User, newcomer) is None
        assert db_session.get(User, existing.id) is not None


class TestGetMe:
    def test_me_response_shape(self, auth_client, test_user_id):
        response = auth_client.get("/me", headers=auth_headers(test_user_id, name="Grace"))

        assert response.status_code == 200
        data = response.json()["data"]
        assert UUID(data["id"]) == test_user_id
        assert data["email"] == email_for(test_user_id)
        assert data["name"] == "Grace"
        assert set(data) == {"id", "email", "name", "avatar_url", "provider", "created_at"}

    def test_token_defaults_match_settings(self):
        """Test tokens are minted for the configured issuer and audience."""
        settings = get_settings()
        verifier = SharedSecretVerifier(
            secret=settings.effective_auth_secret,
            issuer=settings.auth_issuer,
            audiences=settings.audience_list,
        )

        claims = verifier.verify(mint_test_token(uuid4()))

        assert claims["iss"] == settings.auth_issuer
