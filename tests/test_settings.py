"""Tests for application settings and startup validation."""

import pytest
from pydantic import ValidationError

from config.settings import (
    Settings,
    StartupConfigurationError,
    SupabaseSettings,
    validate_startup,
)


class TestSupabaseSettings:

    def test_urls_from_project_id(self):
        settings = SupabaseSettings(project_id="abc123", anon_key="key")

        assert settings.base_url == "https://abc123.supabase.co"
        assert settings.functions_url == "https://abc123.supabase.co/functions/v1/make-server-ca272e8b"
        assert settings.auth_url == "https://abc123.supabase.co/auth/v1"
        assert settings.is_configured

    def test_explicit_url_overrides_project(self):
        settings = SupabaseSettings(project_id="abc123", url="http://localhost:54321/")
        assert settings.functions_url == "http://localhost:54321/functions/v1/make-server-ca272e8b"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_PROJECT_ID", "fromenv")
        monkeypatch.setenv("SUPABASE_FUNCTIONS_SLUG", "custom-fn")
        monkeypatch.setenv("SUPABASE_REQUEST_TIMEOUT", "5")

        settings = SupabaseSettings()

        assert settings.functions_url == "https://fromenv.supabase.co/functions/v1/custom-fn"
        assert settings.request_timeout == 5.0

    def test_unconfigured(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_PROJECT_ID", raising=False)
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        assert not SupabaseSettings(_env_file=None).is_configured


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.api_port == 8000
        assert settings.max_wizard_sessions == 1000
        assert settings.log_level == "INFO"

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="loud")

    def test_session_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(max_wizard_sessions=0)

    @pytest.mark.parametrize("environment,expected", [
        ("production", True),
        ("prod", True),
        ("staging", True),
        ("development", False),
        ("test", False),
    ])
    def test_is_production(self, environment, expected):
        assert Settings(environment=environment).is_production is expected


class TestProductionValidation:

    def test_development_skips_checks(self):
        assert Settings(environment="development", debug=True).validate_production() == []

    def test_production_requires_supabase(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_PROJECT_ID", "")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "")
        monkeypatch.delenv("SUPABASE_URL", raising=False)

        errors = Settings(environment="production").validate_production()

        assert any("SUPABASE_PROJECT_ID" in e for e in errors)
        assert any("SUPABASE_ANON_KEY" in e for e in errors)

    def test_production_rejects_debug_and_wildcard(self):
        errors = Settings(environment="production", debug=True, cors_origins=["*"]).validate_production()

        assert any("APP_DEBUG" in e for e in errors)
        assert any("APP_CORS_ORIGINS" in e for e in errors)

    def test_valid_production(self):
        assert Settings(environment="production").validate_production() == []

    def test_validate_startup_raises_without_exit(self):
        settings = Settings(environment="production", debug=True)
        with pytest.raises(StartupConfigurationError, match="APP_DEBUG"):
            validate_startup(settings, exit_on_failure=False)

    def test_validate_startup_exits(self):
        with pytest.raises(SystemExit):
            validate_startup(Settings(environment="production", debug=True))

    def test_validate_startup_passes(self):
        assert validate_startup(Settings(environment="test"), exit_on_failure=False) is True
