"""Application settings loaded from environment variables.

Environment Configuration:
    RESEARCHHUB_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: PostgreSQL connection string (required)

Auth Configuration:
    AUTH_SECRET: HMAC secret used to verify bearer tokens (required in staging/prod)
    AUTH_ISSUER: Expected JWT issuer
    AUTH_AUDIENCE: Comma-separated list of allowed audiences

OAuth / Email Configuration (consumed by the sign-in frontend, validated here):
    GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET
    GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET
    RESEND_API_KEY

Documents:
    STORAGE_PATH: Local directory for uploaded file bytes
    MAX_UPLOAD_BYTES: Upload size cap
    LLAMA_CLOUD_API_KEY: Document parsing service key (parsing disabled if unset)
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Used only when AUTH_SECRET is unset in local/test.
DEV_AUTH_SECRET = "researchhub-dev-secret-do-not-use-in-prod"


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Validation rules:
    - DATABASE_URL is always required
    - AUTH_SECRET is required in staging and prod
    - OAuth client id and secret must be configured together
    """

    researchhub_env: Environment = Field(default=Environment.LOCAL, alias="RESEARCHHUB_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Token verification
    auth_secret: str | None = Field(default=None, alias="AUTH_SECRET")
    auth_issuer: str = Field(default="researchhub", alias="AUTH_ISSUER")
    auth_audience: str = Field(default="researchhub-api", alias="AUTH_AUDIENCE")

    # OAuth providers
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(default=None, alias="GOOGLE_CLIENT_SECRET")
    github_client_id: str | None = Field(default=None, alias="GITHUB_CLIENT_ID")
    github_client_secret: str | None = Field(default=None, alias="GITHUB_CLIENT_SECRET")

    # Magic-link email delivery
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")

    # Document storage and parsing
    storage_path: str = Field(default="./storage", alias="STORAGE_PATH")
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")  # 50 MB
    llama_cloud_api_key: str | None = Field(default=None, alias="LLAMA_CLOUD_API_KEY")
    llama_cloud_base_url: str = Field(
        default="https://api.cloud.llamaindex.ai", alias="LLAMA_CLOUD_BASE_URL"
    )
    parser_timeout_s: int = Field(default=120, alias="PARSER_TIMEOUT_S")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure environment-dependent settings are consistent."""
        if self.researchhub_env in (Environment.STAGING, Environment.PROD):
            if not self.auth_secret:
                raise ValueError(
                    f"AUTH_SECRET is required for RESEARCHHUB_ENV={self.researchhub_env.value}"
                )

        for provider, client_id, client_secret in (
            ("GOOGLE", self.google_client_id, self.google_client_secret),
            ("GITHUB", self.github_client_id, self.github_client_secret),
        ):
            if bool(client_id) != bool(client_secret):
                raise ValueError(
                    f"{provider}_CLIENT_ID and {provider}_CLIENT_SECRET must be set together"
                )

        if self.max_upload_bytes < 1:
            raise ValueError("MAX_UPLOAD_BYTES must be >= 1")

        return self

    @property
    def effective_auth_secret(self) -> str:
        """Return the token secret, falling back to the dev secret in local/test."""
        return self.auth_secret or DEV_AUTH_SECRET

    @property
    def audience_list(self) -> list[str]:
        """Parse comma-separated audiences into a list."""
        return [a.strip() for a in self.auth_audience.split(",") if a.strip()]

    @property
    def enabled_oauth_providers(self) -> list[str]:
        """Names of OAuth providers with complete credentials."""
        providers = []
        if self.google_client_id:
            providers.append("google")
        if self.github_client_id:
            providers.append("github")
        return providers

    @property
    def parsing_enabled(self) -> bool:
        """Whether remote document parsing is configured."""
        return bool(self.llama_cloud_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
