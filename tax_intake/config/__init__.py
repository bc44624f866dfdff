"""Configuration package."""

from tax_intake.config.settings import (
    AppSettings,
    AutoSaveSettings,
    RemoteStoreSettings,
    SessionSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AutoSaveSettings",
    "RemoteStoreSettings",
    "SessionSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
