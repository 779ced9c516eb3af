"""
Unit tests for outreach_api.config and outreach.common.config.
"""

import pytest
from pydantic import ValidationError

from outreach.common.config import Config
from outreach_api.config import RunnerSettings, validate_config_on_startup, get_settings


# ===== TESTS: RunnerSettings =====

class TestRunnerSettings:
    """Tests for environment-driven API settings."""

    def test_defaults(self):
        settings = RunnerSettings()
        assert settings.environment == "development"
        assert settings.provider_timeout_seconds == 25.0
        assert settings.run_cache_max_age_hours == 168
        assert settings.source_check_timeout_seconds == 5.0
        assert settings.port == 8000
        assert settings.runner_api_secret is None
        assert settings.auth_required is False

    def test_secret_enables_auth(self, monkeypatch):
        monkeypatch.setenv("RUNNER_API_SECRET", "a-long-random-secret-42")
        assert RunnerSettings().auth_required is True

    def test_production_always_requires_auth(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings = RunnerSettings()
        assert settings.is_production
        assert settings.auth_required is True

    def test_environment_normalized(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "Staging")
        assert RunnerSettings().environment == "staging"

    def test_unknown_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "qa")
        with pytest.raises(ValidationError):
            RunnerSettings()

    @pytest.mark.parametrize("secret", ["short", "abababababababab", "aaaaaaaaaaaaaaaaaaaa"])
    def test_weak_secret_rejected(self, monkeypatch, secret):
        monkeypatch.setenv("RUNNER_API_SECRET", secret)
        with pytest.raises(ValidationError):
            RunnerSettings()

    def test_invalid_mongodb_uri_rejected(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "postgres://localhost/db")
        with pytest.raises(ValidationError):
            RunnerSettings()

    def test_cors_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
        assert RunnerSettings().cors_origins_list == ["https://a.example", "https://b.example"]

    def test_cache_age_bounds(self, monkeypatch):
        monkeypatch.setenv("RUN_CACHE_MAX_AGE_HOURS", "0")
        with pytest.raises(ValidationError):
            RunnerSettings()


# ===== TESTS: Startup validation =====

class TestStartupValidation:
    @pytest.fixture(autouse=True)
    def fresh_settings(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_production_without_secret_fails(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        with pytest.raises(ValueError, match="RUNNER_API_SECRET"):
            validate_config_on_startup()

    def test_development_passes(self):
        assert validate_config_on_startup().environment == "development"

    def test_missing_provider_keys_warn(self, monkeypatch, caplog):
        monkeypatch.setattr(Config, "GROQ_API_KEY", "")
        with caplog.at_level("WARNING"):
            validate_config_on_startup()
        assert "GROQ_API_KEY" in caplog.text


# ===== TESTS: Pipeline Config =====

class TestPipelineConfig:
    def test_validate_reports_missing_keys(self, monkeypatch):
        monkeypatch.setattr(Config, "PPLX_API_KEY", "")
        monkeypatch.setattr(Config, "GROQ_API_KEY", "")
        assert Config.validate() == ["PPLX_API_KEY", "GROQ_API_KEY"]

    def test_summary_redacts_keys(self):
        summary = Config.summary()
        assert "pplx-test-mock-key" not in summary
        assert "pplx_key=set" in summary
