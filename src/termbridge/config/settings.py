"""Configuration management for termbridge.

Loads settings from a YAML configuration file with environment variable
overrides (``TERMBRIDGE_`` prefix, ``__`` for nested keys). Supports
.env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/termbridge.yaml")

DEFAULT_WELCOME = (
    "termbridge web terminal\r\n"
    "Type 'help' for available commands\r\n"
    "Type 'exit' to close terminal\r\n\r\n"
)


class ClientConfig(BaseModel):
    base_url: str = Field(
        default="http://localhost:8080",
        description="Page/base URL; its scheme selects ws:// or wss://",
    )
    endpoint_path: str = Field(default="/ws/terminal")


class EndpointConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)
    shell_command: str = Field(default="/bin/sh")
    working_directory: str | None = Field(default=None)
    command_timeout: float = Field(default=30.0, gt=0)
    prompt: str = Field(default="$ ")
    welcome: str = Field(default=DEFAULT_WELCOME)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for termbridge.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "TERMBRIDGE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    client: ClientConfig = Field(default_factory=ClientConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs and must lose to the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
