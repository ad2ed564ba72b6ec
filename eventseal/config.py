"""Configuration management with Pydantic and XDG base directory support."""

import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import Field, PrivateAttr, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventseal.utils.crypto import load_or_create_hmac_key

logger = logging.getLogger(__name__)

# Placeholder shipped in sample deployment configs; never a real secret.
PLACEHOLDER_SECRET = "change-this-in-production"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def get_xdg_data_home() -> Path:
    """Get XDG_DATA_HOME directory, defaulting to ~/.local/share."""
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_xdg_config_home() -> Path:
    """Get XDG_CONFIG_HOME directory, defaulting to ~/.config."""
    xdg_config = os.getenv("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


class Settings(BaseSettings):
    """eventseal configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    The audit secret is read once at startup; there is no hot reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="EVENTSEAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Data directories
    data_dir: Path | None = Field(
        default=None,
        description="Override data directory (defaults to XDG_DATA_HOME/eventseal)",
    )

    config_dir: Path | None = Field(
        default=None,
        description="Override config directory (defaults to XDG_CONFIG_HOME/eventseal)",
    )

    # Audit settings
    audit_enabled: bool = Field(
        default=True,
        description="Enable the append-only signed audit trail",
    )

    audit_secret: SecretStr | None = Field(
        default=None,
        description="Inline HMAC secret used to sign audit events and ingestion receipts",
    )

    audit_secret_path: Path | None = Field(
        default=None,
        description="Location of the HMAC key file used when no inline secret is set",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level for CLI runs",
    )

    _resolved_data_dir: Path | None = PrivateAttr(default=None)
    _data_dir_warning_emitted: bool = PrivateAttr(default=False)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> str:
        level = str(value).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    def get_data_dir(self) -> Path:
        """Get the data directory, creating if necessary."""
        if self.data_dir:
            data_dir = self.data_dir
            data_dir.mkdir(parents=True, exist_ok=True)
            return data_dir

        if self._resolved_data_dir is not None:
            return self._resolved_data_dir

        primary_dir = get_xdg_data_home() / "eventseal"
        try:
            primary_dir.mkdir(parents=True, exist_ok=True)
            self._resolved_data_dir = primary_dir
            return primary_dir
        except PermissionError as exc:
            fallback = Path.cwd() / ".eventseal-data"
            fallback.mkdir(parents=True, exist_ok=True)
            self._resolved_data_dir = fallback
            if not self._data_dir_warning_emitted:
                print(
                    f"Warning: cannot create data directory at {primary_dir} ({exc}). "
                    f"Using local '{fallback}' instead. Pass --data-dir to override.",
                    file=sys.stderr,
                )
                self._data_dir_warning_emitted = True
            return fallback

    def get_config_dir(self) -> Path:
        """Get the config directory, creating if necessary."""
        if self.config_dir:
            config_dir = self.config_dir
        else:
            config_dir = get_xdg_config_home() / "eventseal"

        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    def get_audit_path(self) -> Path:
        """Get path to the signed audit trail file."""
        return self.get_data_dir() / "audit.jsonl"

    def get_ingestion_log_path(self) -> Path:
        """Get path to the ingestion receipt log."""
        return self.get_data_dir() / "ingestion.jsonl"

    def get_audit_secret(self) -> bytes:
        """Return the HMAC secret shared by every signer in this process.

        An inline ``audit_secret`` wins; otherwise the key file at
        ``audit_secret_path`` (default ``<config_dir>/audit-signing.key``) is
        loaded, or generated with mode 0600 on first use.

        Raises:
            RuntimeError: If the key file exists but cannot be read
        """
        if self.audit_secret is not None:
            secret = self.audit_secret.get_secret_value()
            if secret == PLACEHOLDER_SECRET:
                logger.warning(
                    "Audit secret is the sample placeholder; set EVENTSEAL_AUDIT_SECRET "
                    "to a private value before signing production records"
                )
            elif not secret:
                logger.warning("Audit secret is empty; signatures will not be authenticated")
            return secret.encode("utf-8")

        key_path = (
            self.audit_secret_path
            if self.audit_secret_path is not None
            else self.get_config_dir() / "audit-signing.key"
        )
        try:
            return load_or_create_hmac_key(key_path, length=32)
        except OSError as exc:
            raise RuntimeError(f"Failed to load audit signing key from '{key_path}'.") from exc


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
