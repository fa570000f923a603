"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from groov.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "access_token_secret": "access",
        "refresh_token_secret": "refresh",
    }
    values.update(overrides)
    return Settings(**values)


class TestSecrets:
    """Access and refresh secrets must differ."""

    def test_distinct_secrets_accepted(self):
        settings = _settings()
        assert settings.access_token_secret != settings.refresh_token_secret

    def test_identical_secrets_rejected(self):
        with pytest.raises(ValidationError, match="must be different"):
            _settings(access_token_secret="same", refresh_token_secret="same")


class TestCookieSecure:
    """Secure cookies everywhere except local and test."""

    @pytest.mark.parametrize("environment", ["local", "test", "LOCAL"])
    def test_insecure_environments(self, environment):
        assert _settings(environment=environment).cookie_secure is False

    @pytest.mark.parametrize("environment", ["production", "staging"])
    def test_secure_environments(self, environment):
        assert _settings(environment=environment).cookie_secure is True


class TestCorsOrigins:
    def test_parses_comma_separated_list(self):
        settings = _settings(cors_origins="http://a.test, http://b.test,,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_default_allows_local_frontend(self):
        settings = _settings(cors_origins="http://localhost:3000")
        assert settings.cors_origins_list == ["http://localhost:3000"]


class TestEnvironment:
    def test_reads_environment_variables(self, monkeypatch):
        monkeypatch.setenv("BCRYPT_ROUNDS", "6")
        monkeypatch.setenv("ACCESS_TOKEN_SECRET", "env-access")
        monkeypatch.setenv("REFRESH_TOKEN_SECRET", "env-refresh")

        settings = Settings()

        assert settings.bcrypt_rounds == 6
        assert settings.access_token_secret == "env-access"
