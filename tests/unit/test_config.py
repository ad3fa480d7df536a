"""Unit tests for settings."""

from core.config import Settings


class TestSettings:
    def test_defaults_to_sqlite(self):
        settings = Settings(_env_file=None)

        assert settings.async_database_url.startswith("sqlite+aiosqlite://")
        assert settings.is_production is False

    def test_postgres_url_gets_async_driver(self):
        settings = Settings(
            _env_file=None, database_url="postgresql://user:pw@localhost/groups"
        )

        assert settings.async_database_url == "postgresql+asyncpg://user:pw@localhost/groups"

    def test_production_flag(self):
        assert Settings(_env_file=None, app_env="production").is_production

    def test_tables_created_on_startup_by_default(self):
        settings = Settings(_env_file=None)

        assert settings.create_tables is True
        assert settings.database_echo is False
