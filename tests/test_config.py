"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from tax_intake.config import (
    AppSettings,
    AutoSaveSettings,
    RemoteStoreSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Environment-driven settings groups."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.autosave.debounce_seconds == 1.0
        assert settings.autosave.indicator_min_seconds == 1.2
        assert settings.session.storage_key == "formSession"
        assert settings.remote.endpoint_url.startswith("https://")

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TAX_INTAKE_AUTOSAVE_RETRY_ATTEMPTS", "5")
        assert AutoSaveSettings().retry_attempts == 5

    def test_app_settings_fields(self):
        assert set(AppSettings.model_fields) == {"debug_mode", "max_amount"}

    def test_endpoint_must_be_http(self):
        with pytest.raises(ValidationError, match="http"):
            RemoteStoreSettings(endpoint_url="ftp://example.com")

    def test_debounce_bounds(self):
        with pytest.raises(ValidationError):
            AutoSaveSettings(debounce_seconds=-1)

    def test_validate_all_settings(self):
        assert validate_all_settings() == {
            "remote": True,
            "autosave": True,
            "session": True,
            "app": True,
        }

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("TAX_INTAKE_REMOTE_REQUEST_TIMEOUT_SECONDS", "-3")

        results = validate_all_settings()

        assert results["remote"] is False
        assert "remote_error" in results
        assert results["autosave"] is True
