"""
Configuration Management for Tax Intake

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ENDPOINT_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbzOgroOV99-ZevoFdpcEf1EkKZzo1A-0zTpgfGBSefcOcFKfEvqEg8cXZO_Gs2SP94JYg/exec"
)


class RemoteStoreSettings(BaseSettings):
    """Remote progress store (spreadsheet-backed web app) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_INTAKE_REMOTE_",
        extra="ignore"
    )

    endpoint_url: str = Field(
        default=DEFAULT_ENDPOINT_URL,
        description="URL of the remote store endpoint"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single remote request"
    )

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Only http(s) endpoints are supported."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Remote endpoint must be an http(s) URL, got: {v}")
        return v


class AutoSaveSettings(BaseSettings):
    """Debounce, saving indicator and retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_INTAKE_AUTOSAVE_",
        extra="ignore"
    )

    debounce_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Quiet window after the last edit before a save is sent"
    )
    indicator_min_seconds: float = Field(
        default=1.2,
        ge=0.0,
        le=10.0,
        description="Minimum time the saving indicator stays visible"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per save before giving up"
    )
    retry_wait_min_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum backoff between save attempts"
    )
    retry_wait_max_seconds: float = Field(
        default=8.0,
        ge=0.0,
        description="Maximum backoff between save attempts"
    )


class SessionSettings(BaseSettings):
    """Local session record configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_INTAKE_SESSION_",
        extra="ignore"
    )

    storage_path: Path = Field(
        default=Path.home() / ".tax_intake" / "session.json",
        description="File holding the local session record"
    )
    storage_key: str = Field(
        default="formSession",
        min_length=1,
        description="Key the session record is stored under"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Validation thresholds
    max_amount: float = Field(
        default=1_000_000_000.0,
        gt=0,
        description="Largest monetary value accepted in any field"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def remote(self) -> RemoteStoreSettings:
        return RemoteStoreSettings()

    @property
    def autosave(self) -> AutoSaveSettings:
        return AutoSaveSettings()

    @property
    def session(self) -> SessionSettings:
        return SessionSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every group that failed to load.
    """
    results = {}
    settings = get_settings()

    for name in ("remote", "autosave", "session", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
