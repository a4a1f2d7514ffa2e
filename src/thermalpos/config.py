"""Configuration management for thermalpos."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from thermalpos.models.transport import ConnectionPolicy, RfcommTransportConfig, TransportConfig

logger = logging.getLogger(__name__)


class AppConfig(BaseModel):
    """Application configuration loaded from config.yaml."""

    transport: TransportConfig = Field(default_factory=RfcommTransportConfig)
    connection: ConnectionPolicy = Field(default_factory=ConnectionPolicy)
    # Saved printer and receipt design live here
    state_file: Path = Path("./thermalpos-state.yaml")
    # API key for external access (optional, if not set API is open)
    api_key: str | None = None


class Settings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(
        env_prefix="THERMALPOS_",
        env_file=".env",
        extra="ignore",
    )

    config_file: Path = Path("config.yaml")
    host: str = "0.0.0.0"
    port: int = 7980
    debug: bool = False


def load_config(config_path: Path) -> AppConfig:
    """Load application configuration from YAML file."""
    if not config_path.exists():
        logger.info(f"No config file at {config_path}, using defaults")
        return AppConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    # YAML returns None for empty sections
    for key in ("transport", "connection"):
        if key in data and data[key] is None:
            del data[key]

    config = AppConfig.model_validate(data)

    # Relative state paths are relative to the config file
    if not config.state_file.is_absolute():
        config.state_file = config_path.parent / config.state_file

    return config


# Global settings instance
settings = Settings()
