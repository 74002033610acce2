"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All parameters are loaded from YAML and validated using Pydantic models.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from family_health_log.utils.exceptions import ConfigurationError


class StorageConfig(BaseModel):
    """Key-value storage configuration."""

    backend: str = Field("json_file", pattern="^(json_file|memory)$")
    data_dir: str = "data"
    key_prefix: str = "healthLogs_"


class UsersConfig(BaseModel):
    """Family roster configuration."""

    roster: list[str] = Field(default_factory=lambda: ["Me", "Wife", "Family"])
    labels: dict[str, str] = Field(
        default_factory=lambda: {"Me": "我", "Wife": "老婆", "Family": "家人"}
    )
    default_user: str = "Me"

    @model_validator(mode="after")
    def _check_roster(self) -> "UsersConfig":
        if not self.roster:
            raise ValueError("roster must name at least one user")
        if len(set(self.roster)) != len(self.roster):
            raise ValueError("roster contains duplicate users")
        if self.default_user not in self.roster:
            raise ValueError(f"default_user {self.default_user!r} is not in the roster")
        return self

    def label_for(self, user: str) -> str:
        """Return the display label of a user, falling back to the user id."""
        return self.labels.get(user, user)


class ProcessingConfig(BaseModel):
    """Day boundary and derived-metric configuration."""

    timezone: str = "Asia/Shanghai"
    water_goal_ml: int = Field(2000, gt=0)
    default_height_m: float = Field(1.75, gt=0)


class ExportConfig(BaseModel):
    """CSV export configuration."""

    dir: str = "output"
    file_name: str = "health_logs_{timestamp}.csv"
    encoding: str = "utf-8"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    users: UsersConfig = Field(default_factory=UsersConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="FHL_", env_nested_delimiter="__", case_sensitive=False
    )


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            self.config = AppConfig(**config_dict)

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_storage_config(self) -> StorageConfig:
        """Get key-value storage configuration."""
        return self.config.storage

    def get_users_config(self) -> UsersConfig:
        """Get family roster configuration."""
        return self.config.users

    def get_processing_config(self) -> ProcessingConfig:
        """Get processing configuration."""
        return self.config.processing

    def get_export_config(self) -> ExportConfig:
        """Get export configuration."""
        return self.config.export

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
