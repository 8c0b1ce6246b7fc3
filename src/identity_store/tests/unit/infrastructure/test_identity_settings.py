"""Unit tests for infrastructure settings."""

import pytest
from pydantic import SecretStr, ValidationError

from infrastructure.settings import (
    DatabaseSettings,
    IdentitySettings,
    get_database_settings,
    get_identity_settings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_max_equal_to_min_is_valid(self):
        """Should allow max == min."""
        settings = DatabaseSettings(pool_min_connections=5, pool_max_connections=5)
        assert settings.pool_max_connections == 5

    def test_pool_min_must_be_positive(self):
        """Pool min connections must be >= 1."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_pool_max_respects_upper_limit(self):
        """Pool max should not exceed reasonable limit."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)


class TestDatabaseSettingsDriver:
    """Tests for driver selection and connection strings."""

    def test_defaults_to_asyncpg(self):
        """Production default is PostgreSQL through asyncpg."""
        settings = DatabaseSettings()
        assert settings.drivername == "postgresql+asyncpg"
        assert settings.is_sqlite is False

    def test_sqlite_driver_detected(self):
        """aiosqlite drivers are recognized as SQLite."""
        settings = DatabaseSettings(drivername="sqlite+aiosqlite", database=":memory:")
        assert settings.is_sqlite is True

    def test_connection_string_hides_password(self):
        """Connection string is safe to log."""
        settings = DatabaseSettings(
            host="db",
            port=5433,
            database="ids",
            username="svc",
            password=SecretStr("hunter2"),
        )
        assert settings.connection_string == "postgresql+asyncpg://svc@db:5433/ids"
        assert "hunter2" not in settings.connection_string

    def test_sqlite_connection_string(self):
        """SQLite connection strings only carry the database."""
        settings = DatabaseSettings(drivername="sqlite+aiosqlite", database=":memory:")
        assert settings.connection_string == "sqlite+aiosqlite:///:memory:"

    def test_reads_environment(self, monkeypatch):
        """Settings are loaded from IDENTITY_DB_ variables."""
        monkeypatch.setenv("IDENTITY_DB_HOST", "envhost")
        monkeypatch.setenv("IDENTITY_DB_PORT", "6543")

        settings = DatabaseSettings()

        assert settings.host == "envhost"
        assert settings.port == 6543


class TestIdentitySettings:
    """Tests for identity policy settings."""

    def test_defaults(self):
        """Emails are not unique by default and names allow common symbols."""
        settings = IdentitySettings()
        assert settings.require_unique_email is False
        for ch in "aZ9-._@+":
            assert ch in settings.allowed_user_name_characters

    def test_reads_environment(self, monkeypatch):
        """Settings are loaded from IDENTITY_ variables."""
        monkeypatch.setenv("IDENTITY_REQUIRE_UNIQUE_EMAIL", "true")

        settings = IdentitySettings()

        assert settings.require_unique_email is True


class TestCachedGetters:
    """Tests for the lru_cache settings accessors."""

    def test_database_settings_are_cached(self):
        """Repeated calls return the same instance."""
        assert get_database_settings() is get_database_settings()

    def test_identity_settings_are_cached(self):
        """Repeated calls return the same instance."""
        assert get_identity_settings() is get_identity_settings()
