"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from researchhub.config import DEV_AUTH_SECRET, Environment, Settings


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "DATABASE_URL": "postgresql+psycopg://localhost/test",
        "RESEARCHHUB_ENV": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestDefaults:
    def test_defaults(self, monkeypatch):
        for name in ("AUTH_SECRET", "MAX_UPLOAD_BYTES", "LLAMA_CLOUD_API_KEY", "STORAGE_PATH"):
            monkeypatch.delenv(name, raising=False)

        s = _make_settings()

        assert s.researchhub_env == Environment.TEST
        assert s.max_upload_bytes == 50 * 1024 * 1024
        assert s.storage_path == "./storage"
        assert s.parsing_enabled is False
        assert s.effective_auth_secret == DEV_AUTH_SECRET

    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ValidationError):
            Settings(RESEARCHHUB_ENV="test")

    def test_audience_list_parsing(self):
        s = _make_settings(AUTH_AUDIENCE=" web , mobile ,,")

        assert s.audience_list == ["web", "mobile"]


class TestEnvironmentRules:
    @pytest.mark.parametrize("env", ["staging", "prod"])
    def test_auth_secret_required_outside_local(self, monkeypatch, env):
        monkeypatch.delenv("AUTH_SECRET", raising=False)

        with pytest.raises(ValidationError, match="AUTH_SECRET"):
            _make_settings(RESEARCHHUB_ENV=env)

    def test_prod_with_secret(self):
        s = _make_settings(RESEARCHHUB_ENV="prod", AUTH_SECRET="real-secret")

        assert s.effective_auth_secret == "real-secret"

    def test_unknown_env_rejected(self):
        with pytest.raises(ValidationError):
            _make_settings(RESEARCHHUB_ENV="qa")


class TestProviderAndUploadRules:
    def test_oauth_pair_must_be_complete(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_CLIENT_SECRET", raising=False)

        with pytest.raises(ValidationError, match="GOOGLE_CLIENT_ID"):
            _make_settings(GOOGLE_CLIENT_ID="id-only")

    def test_enabled_oauth_providers(self):
        s = _make_settings(
            GOOGLE_CLIENT_ID="g",
            GOOGLE_CLIENT_SECRET="gs",
            GITHUB_CLIENT_ID="h",
            GITHUB_CLIENT_SECRET="hs",
        )

        assert s.enabled_oauth_providers == ["google", "github"]

    def test_upload_cap_must_be_positive(self):
        with pytest.raises(ValidationError, match="MAX_UPLOAD_BYTES"):
            _make_settings(MAX_UPLOAD_BYTES=0)

    def test_parsing_enabled_with_key(self):
        assert _make_settings(LLAMA_CLOUD_API_KEY="llx-123").parsing_enabled is True
