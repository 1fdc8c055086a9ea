"""Tests for settings loading and production validation."""

import pytest

from files_manager.core.config import ConfigurationError, Environment, Settings


class TestLoading:

    def test_reads_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SESSION_TTL_SECONDS=60\nPROCESSOR_COMMAND=thumbnailer\n")

        loaded = Settings(_env_file=str(env_file))
        assert loaded.session_ttl_seconds == 60
        assert loaded.processor_command == "thumbnailer"

    def test_environment_names_are_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("worker_poll_interval", "3")
        assert Settings(_env_file=None).worker_poll_interval == 3

    def test_log_level_is_normalised(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_non_positive_session_ttl_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, session_ttl_seconds=0)


class TestCors:

    def test_origins_are_split(self):
        loaded = Settings(_env_file=None, cors_allowed_origins="https://a.example, https://b.example")
        assert loaded.get_cors_origins() == ["https://a.example", "https://b.example"]

    def test_wildcard_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, cors_allowed_origins="*").get_cors_origins()


class TestProductionValidation:

    def test_development_only_reports(self):
        loaded = Settings(_env_file=None, database_url="sqlite:///x.db")
        assert loaded.production_findings()
        loaded.validate_production_config()

    def test_production_refuses_sqlite_and_localhost(self):
        loaded = Settings(
            _env_file=None,
            environment=Environment.PRODUCTION,
            database_url="sqlite:///x.db",
            cors_allowed_origins="http://localhost:3000",
        )
        with pytest.raises(ConfigurationError) as exc:
            loaded.validate_production_config()
        assert "SQLite" in str(exc.value)
        assert "localhost" in str(exc.value)

    def test_production_accepts_server_database(self):
        Settings(
            _env_file=None,
            environment=Environment.PRODUCTION,
            database_url="postgresql://files:secret@db/files",
            cors_allowed_origins="https://files.example",
        ).validate_production_config()
