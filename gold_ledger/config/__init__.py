"""Configuration package."""

from gold_ledger.config.settings import (
    AppSettings,
    BusyCommandPolicy,
    ConversationSettings,
    DialogProfile,
    RenderSettings,
    Settings,
    StorageSettings,
    SUPPORTED_EXPORT_FORMATS,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BusyCommandPolicy",
    "ConversationSettings",
    "DialogProfile",
    "RenderSettings",
    "Settings",
    "StorageSettings",
    "SUPPORTED_EXPORT_FORMATS",
    "get_settings",
    "validate_all_settings",
]
