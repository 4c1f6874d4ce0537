"""
Configuration Management for Gold Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: storage locations, rendering
preferences and the dialog policies of the conversational intake.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_EXPORT_FORMATS = ("csv", "xlsx", "pdf")


class DialogProfile(str, Enum):
    """
    Which questions a transaction dialog asks.

    GOLD_BASIC: unit price -> total amount
    GOLD_NAMED: counterparty name -> unit price -> total amount
    FULL:       name -> item kind -> price (+ subtype) -> total/quantity -> note
    """
    GOLD_BASIC = "gold_basic"
    GOLD_NAMED = "gold_named"
    FULL = "full"


class BusyCommandPolicy(str, Enum):
    """What happens when a menu command arrives while a dialog is active."""
    IGNORE = "ignore"
    ABORT_AND_RESTART = "abort_and_restart"
    REINTERPRET = "reinterpret"


class StorageSettings(BaseSettings):
    """Where ledgers, the identity directory and exports live."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding one ledger document per identity"
    )
    export_dir: Path = Field(
        default=Path("./exports"),
        description="Directory receiving invoices and exports"
    )
    users_file: Path = Field(
        default=Path("./users.json"),
        description="Shared identity directory document"
    )
    audit_file: Path = Field(
        default=Path("./data/audit.jsonl"),
        description="Append-only audit log (JSON lines)"
    )
    persist_audit: bool = Field(
        default=True,
        description="Persist audit events in addition to local logging"
    )


class RenderSettings(BaseSettings):
    """Artifact rendering configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_RENDER_",
        extra="ignore"
    )

    number_locale: str = Field(
        default="en",
        pattern="^(en|fa)$",
        description="Digit and separator convention for rendered numbers"
    )
    currency_label: str = Field(
        default="Toman",
        max_length=20,
        description="Unit shown after currency figures"
    )
    weight_label: str = Field(
        default="g",
        max_length=20,
        description="Unit shown after gold weights"
    )
    font_path: Optional[Path] = Field(
        default=None,
        description="TrueType font embedded in invoices and PDFs"
    )
    export_formats: str = Field(
        default="csv,xlsx,pdf",
        description="Comma-separated list of enabled export formats"
    )
    page_break_threshold_pt: float = Field(
        default=120.0,
        ge=40.0,
        description="Remaining page height below which the PDF starts a new page"
    )

    @field_validator("export_formats")
    @classmethod
    def validate_export_formats(cls, v: str) -> str:
        """Reject unknown export formats early."""
        formats = [fmt.strip().lower() for fmt in v.split(",") if fmt.strip()]
        unknown = [fmt for fmt in formats if fmt not in SUPPORTED_EXPORT_FORMATS]
        if unknown:
            raise ValueError(
                f"Unsupported export formats: {unknown}. "
                f"Allowed: {list(SUPPORTED_EXPORT_FORMATS)}"
            )
        if not formats:
            raise ValueError("At least one export format must be enabled")
        return ",".join(formats)

    @property
    def export_formats_list(self) -> list[str]:
        """Get enabled export formats as a list."""
        return self.export_formats.split(",")


class ConversationSettings(BaseSettings):
    """Dialog behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_CONVERSATION_",
        extra="ignore"
    )

    dialog_profile: DialogProfile = Field(
        default=DialogProfile.FULL,
        description="Which questions a transaction dialog asks"
    )
    busy_command_policy: BusyCommandPolicy = Field(
        default=BusyCommandPolicy.REINTERPRET,
        description="Handling of menu commands sent mid-dialog"
    )
    admin_identity: str = Field(
        default="507528648",
        description="Recipient of new-user notifications"
    )
    session_idle_timeout_minutes: Optional[int] = Field(
        default=None,
        ge=1,
        description="Purge sessions idle for longer than this (None keeps them)"
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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def render(self) -> RenderSettings:
        return RenderSettings()

    @property
    def conversation(self) -> ConversationSettings:
        return ConversationSettings()

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

    Returns a dict of {setting_name: is_valid} plus `<name>_error`
    entries for the sections that failed. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "render", "conversation", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
