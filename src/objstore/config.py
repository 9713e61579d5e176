"""Configuration settings for objstore."""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from objstore.observability.logging import get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Environment Variable Substitution
# -----------------------------------------------------------------------------

ENV_VAR_PATTERN = re.compile(r"\$\{env\.([A-Z_][A-Z0-9_]*)(?::=([^}]*))?\}")


def replace_env_vars(config: Any) -> Any:
    """Recursively replace ${env.VAR:=default} patterns in config."""
    if isinstance(config, dict):
        return {k: replace_env_vars(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [replace_env_vars(v) for v in config]
    elif isinstance(config, str):

        def replacer(match: re.Match) -> str:
            var_name = match.group(1)
            default = match.group(2)
            value = os.environ.get(var_name)
            if value is not None:
                return value
            if default is not None:
                return default
            raise ValueError(f"Environment variable {var_name} is required but not set")

        return ENV_VAR_PATTERN.sub(replacer, config)
    return config


# -----------------------------------------------------------------------------
# Object Storage Configuration
# -----------------------------------------------------------------------------


class LocalFileStorageConfig(BaseModel):
    """Local filesystem root holding one file per object."""

    type: Literal["local"] = "local"
    base_path: Path = Field(
        default=Path("/storage"),
        description="Directory holding stored objects",
    )

    @classmethod
    def sample_config(cls) -> dict[str, Any]:
        return {
            "type": "local",
            "base_path": "${env.OBJSTORE_STORAGE_PATH:=/storage}",
        }


# -----------------------------------------------------------------------------
# Server / Logging Configuration
# -----------------------------------------------------------------------------


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)


class LoggingConfig(BaseModel):
    """structlog configuration."""

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    enable_access_logs: bool = Field(default=True)


# -----------------------------------------------------------------------------
# Main Stack Configuration
# -----------------------------------------------------------------------------


class StackConfig(BaseModel):
    """Main configuration for the objstore service."""

    version: int = Field(default=1, description="Config schema version")

    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: LocalFileStorageConfig = Field(default_factory=LocalFileStorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    enable_metrics: bool = Field(
        default=True,
        description="Expose Prometheus metrics at /metrics",
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StackConfig":
        """Create config from dict with environment variable substitution."""
        resolved = replace_env_vars(data)
        return cls.model_validate(resolved)

    @classmethod
    def sample_config(cls) -> dict[str, Any]:
        """Generate sample configuration for documentation."""
        return {
            "version": 1,
            "server": {
                "host": "0.0.0.0",
                "port": 8080,
            },
            "storage": LocalFileStorageConfig.sample_config(),
            "logging": {
                "level": "${env.OBJSTORE_LOG_LEVEL:=INFO}",
                "json_logs": False,
            },
            "enable_metrics": True,
        }


# -----------------------------------------------------------------------------
# Settings (for simple environment-based config)
# -----------------------------------------------------------------------------


class Settings(BaseSettings):
    """Simple settings for environment-based configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OBJSTORE_",
        env_file=".env",
        case_sensitive=False,
    )

    # Config file path (if using YAML config)
    config_file: Path | None = Field(
        default=None,
        description="Path to YAML configuration file",
    )

    # Used if no config file
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    debug: bool = Field(default=False)
    storage_path: Path = Field(default=Path("/storage"))
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    enable_metrics: bool = Field(default=True)

    def to_stack_config(self) -> StackConfig:
        """Convert simple settings to full StackConfig."""
        return StackConfig(
            server=ServerConfig(host=self.host, port=self.port),
            storage=LocalFileStorageConfig(base_path=self.storage_path),
            logging=LoggingConfig(level=self.log_level, json_logs=self.json_logs),
            enable_metrics=self.enable_metrics,
        )


def load_config(settings: Settings) -> StackConfig:
    """Load configuration from file or environment."""
    if settings.config_file and settings.config_file.exists():
        logger.info("Loading config from file", path=str(settings.config_file))
        with open(settings.config_file) as f:
            config_dict = yaml.safe_load(f) or {}
        return StackConfig.from_dict(config_dict)
    else:
        logger.info("Using environment-based configuration")
        return settings.to_stack_config()
