# SPDX-License-Identifier: MIT
"""Centralised application configuration management.

This module exposes :class:`Settings`, a ``pydantic-settings`` model that
combines values sourced from the YAML configuration file and environment
variables. Environment variables (and a ``.env`` file) take precedence over
file-based values and the merged configuration is validated before use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from clients.models import ANALYSIS_STATES, AnalysisState
from io_utils.loader import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_FILE, load_app_config


class Settings(BaseSettings):
    """Application settings combining file-based and environment configuration."""

    song_host: str = Field(..., min_length=1, description="Record store base URL.")
    song_name: str | None = Field(
        None, description="Label for the record store environment in logs."
    )
    song_page_size: int = Field(100, ge=1, description="Analyses requested per page.")
    song_max_concurrent: int = Field(
        5, ge=1, description="Maximum number of update requests in flight."
    )
    song_page_timeout: float = Field(
        10.0, gt=0, description="Timeout in seconds for fetching one page."
    )
    song_update_timeout: float = Field(
        5.0, gt=0, description="Timeout in seconds for one update request."
    )
    ego_host: str = Field(..., min_length=1, description="Auth service base URL.")
    ego_client_id: str = Field("", description="Application client id.")
    ego_client_secret: SecretStr = Field(
        SecretStr(""), description="Application client secret.", repr=False
    )
    ego_timeout: float = Field(
        10.0, gt=0, description="Timeout in seconds for auth service requests."
    )
    migration_chain: Literal["prod", "dev"] = Field(
        "prod", description="Which migration chain to run."
    )
    analysis_states: list[AnalysisState] = Field(
        default_factory=lambda: list(ANALYSIS_STATES),
        min_length=1,
        description="Analysis states to migrate.",
    )
    studies: list[str] | None = Field(
        None, description="Only migrate these studies when set."
    )
    log_level: str = Field("INFO", description="Logging verbosity level.")
    logfire_token: str | None = Field(
        None, description="Logfire authentication token, if available.", repr=False
    )

    model_config = SettingsConfigDict(
        env_prefix="SM_", env_file=".env", extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs and must lose to the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @property
    def has_credentials(self) -> bool:
        """Return ``True`` when both application credentials are present."""
        return bool(self.ego_client_id and self.ego_client_secret.get_secret_value())


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate application settings.

    Configuration values are read from the application configuration file and
    then merged with environment variables using ``pydantic-settings``. When a
    value is provided in both sources the environment variable wins. A ``.env``
    file in the working directory is loaded automatically when present. The
    optional ``config_path`` parameter allows overriding the default
    ``config/app.yaml`` location; the default file may be absent.

    Args:
        config_path: Optional path to a YAML configuration file.

    Returns:
        Settings: Fully validated application configuration.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
        RuntimeError: If required configuration values are missing or invalid.
    """
    config: dict[str, Any]
    if config_path:
        cfg_path = Path(config_path)
        config = load_app_config(cfg_path.parent, cfg_path.name)
    elif (DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE).exists():
        config = load_app_config()
    else:
        config = {}
    try:
        return Settings(**config)
    except ValidationError as exc:
        # Summarise validation issues so the caller receives clear feedback.
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise RuntimeError(f"Invalid configuration: {details}") from exc


__all__ = ["Settings", "load_settings"]
