"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from src.config.settings import Settings


def _settings(**overrides) -> Settings:
    values = {"jwt_secret": "unit-test-secret", **overrides}
    return Settings(_env_file=None, **values)


class TestDatabaseDsn:
    def test_built_from_parts(self):
        config = _settings(db_host="db", db_port=6543, db_user="app", db_password="s3cret", db_name="auth")
        assert config.database_dsn == "postgresql+asyncpg://app:s3cret@db:6543/auth"

    def test_password_is_quoted(self):
        config = _settings(db_password="p@ss/word")
        assert "p%40ss%2Fword" in config.database_dsn

    def test_database_url_overrides_parts(self):
        config = _settings(database_url="sqlite+aiosqlite://", db_host="ignored")
        assert config.database_dsn == "sqlite+aiosqlite://"


class TestValidation:
    def test_environment_is_normalized(self):
        assert _settings(environment="PRODUCTION").environment == "production"

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValidationError):
            _settings(environment="qa")

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            _settings(jwt_secret="")

    def test_session_defaults(self):
        config = _settings()
        assert config.jwt_algorithm == "HS256"
        assert config.jwt_issuer == "my-app"
        assert config.access_token_expire_minutes == 15
        assert config.refresh_token_expire_hours == 24
        assert config.api_prefix == "/api"
