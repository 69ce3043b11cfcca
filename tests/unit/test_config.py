"""
Unit tests for settings loading.
"""
import pytest

import app.config as config
from app.config import ConfigurationError, get_settings


@pytest.fixture
def fresh_settings(monkeypatch):
    monkeypatch.setattr(config, "_settings", None)


class TestGetSettings:

    def test_missing_secret_is_fatal(self, fresh_settings, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)
        with pytest.raises(ConfigurationError):
            get_settings()

    def test_blank_secret_is_fatal(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "   ")
        with pytest.raises(ConfigurationError):
            get_settings()

    def test_loaded_once(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "first-secret")
        first = get_settings()
        monkeypatch.setenv("JWT_SECRET", "second-secret")

        assert get_settings() is first
        assert get_settings().jwt_secret == "first-secret"

    def test_defaults(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3cret-value")
        monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_HOURS", raising=False)
        monkeypatch.delenv("JWT_ALGORITHM", raising=False)

        settings = get_settings()

        assert settings.access_token_expire_hours == 12
        assert settings.jwt_algorithm == "HS256"

    def test_algorithm_and_lifetime_ignore_environment(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3cret-value")
        monkeypatch.setenv("JWT_ALGORITHM", "none")
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_HOURS", "9999")

        settings = get_settings()

        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_expire_hours == 12

    def test_bcrypt_rounds_from_environment(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3cret-value")
        monkeypatch.setenv("BCRYPT_ROUNDS", "5")

        assert get_settings().bcrypt_rounds == 5

    def test_secret_not_in_repr(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3cret-value")
        assert "s3cret-value" not in repr(get_settings())
