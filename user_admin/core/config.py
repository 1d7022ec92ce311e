"""
Configuration management using Pydantic Settings.

Loads configuration from environment variables with validation and type safety.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    See .env.example for all available options.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="user-admin", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="production", description="Environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")
    debug: bool = Field(default=False, description="Debug mode")

    # Users backend
    api_base_url: str = Field(
        default="http://localhost:3001",
        validation_alias=AliasChoices("API_BASE_URL", "NEXT_PUBLIC_API_URL"),
        description="Base URL of the users REST backend",
    )
    api_timeout: int = Field(default=30, description="Backend request timeout in seconds")

    # Admin page behaviour
    search_debounce_ms: int = Field(
        default=300, description="Quiet period before a search is sent (milliseconds)"
    )

    # CSV export
    export_filename: str = Field(default="users.csv", description="Exported CSV file name")
    export_output_dir: str = Field(default="./exports", description="CLI export directory")

    # Privacy
    mask_customer_data_in_logs: bool = Field(
        default=True, description="Mask e-mail addresses and phone numbers in logs"
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    enable_api_docs: bool = Field(default=True, description="Enable API documentation")

    # Security
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Allowed CORS origins (comma-separated)",
    )

    @field_validator("allowed_origins")
    @classmethod
    def parse_allowed_origins(cls, v: str) -> list[str]:
        """Parse comma-separated origins into list."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise the backend URL so paths can be appended directly."""
        return v.rstrip("/")

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.app_env == "development"


# Keys of config/local.yaml mapped onto the environment variables Settings reads.
YAML_ENV_MAPPING: dict[tuple[str, str], str] = {
    ("backend", "api_base_url"): "API_BASE_URL",
    ("backend", "api_timeout"): "API_TIMEOUT",
    ("app", "log_level"): "LOG_LEVEL",
    ("app", "log_format"): "LOG_FORMAT",
    ("app", "environment"): "APP_ENV",
    ("ui", "search_debounce_ms"): "SEARCH_DEBOUNCE_MS",
    ("export", "output_dir"): "EXPORT_OUTPUT_DIR",
    ("server", "host"): "API_HOST",
    ("server", "port"): "API_PORT",
}


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load the optional local YAML configuration.

    Args:
        config_path: Path to config/local.yaml

    Returns:
        Parsed configuration, empty if the file does not exist
    """
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def yaml_to_env(config: dict[str, Any]) -> dict[str, str]:
    """
    Flatten a local.yaml configuration into environment variables.

    Only keys listed in YAML_ENV_MAPPING are taken over; booleans are
    lower-cased the way pydantic expects them.
    """
    env: dict[str, str] = {}
    for (section, key), env_name in YAML_ENV_MAPPING.items():
        value = (config.get(section) or {}).get(key)
        if value is None or value == "":
            continue
        env[env_name] = str(value).lower() if isinstance(value, bool) else str(value)
    return env


# Global settings instance
settings = Settings()
