"""
Service Settings

Settings are read from a local YAML file and from CONFIGWATCH_* environment
variables. Values in the YAML file take precedence over the environment.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError
from .logging_setup import get_service_logger

logger = get_service_logger("settings")

DEFAULT_CONFIG_PATHS = (
    Path("/etc/configwatch/config.yaml"),
    Path("config.yaml"),
)

# YAML section -> {yaml key: settings field}
YAML_FIELDS: dict[str, dict[str, str]] = {
    "provider": {
        "client_side_id": "client_side_id",
        "base_url": "base_url",
        "config_key": "config_key",
        "context_key": "context_key",
        "log_level_flag": "log_level_flag",
    },
    "refresh": {
        "interval_s": "refresh_interval_s",
        "fetch_timeout_s": "fetch_timeout_s",
    },
    "server": {
        "host": "host",
        "port": "port",
        "admin_port": "admin_port",
    },
}


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables use the CONFIGWATCH_ prefix, e.g.
    CONFIGWATCH_CLIENT_SIDE_ID, CONFIGWATCH_PORT.
    """

    # Provider
    client_side_id: str = ""
    base_url: str = "https://clientsdk.launchdarkly.com"
    config_key: str = "ai-config--ai-new-model-chatbot"
    context_key: str = "user-key"
    log_level_flag: str = ""

    # Refresh
    refresh_interval_s: float = Field(default=5.0, gt=0)
    fetch_timeout_s: float = Field(default=10.0, gt=0)

    # HTTP server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    # /health and /sync, always bound to 127.0.0.1
    admin_port: int = Field(default=8082, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="CONFIGWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def find_config_path(config_path: str | Path | None = None) -> Path | None:
    """Return the explicit path, or the first default path that exists"""
    if config_path:
        return Path(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return path

    return None


def load_yaml_config(path: Path | None) -> dict[str, Any]:
    """
    Load the local YAML file.

    Returns:
        Parsed mapping, or an empty dict if the file does not exist

    Raises:
        ConfigError: If the file cannot be parsed
    """
    if path is None:
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found: {path}")
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    return data


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Map nested YAML sections onto flat Settings fields"""
    values: dict[str, Any] = {}
    for section, fields in YAML_FIELDS.items():
        section_data = data.get(section) or {}
        if not isinstance(section_data, dict):
            raise ConfigError(f"section '{section}' must be a mapping")
        for yaml_key, field_name in fields.items():
            value = section_data.get(yaml_key)
            if value is not None and value != "":
                values[field_name] = value
    return values


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Build Settings from the YAML file and the environment.

    Args:
        config_path: Explicit YAML path; defaults are searched when omitted

    Raises:
        ConfigError: If the file is malformed or a value fails validation
    """
    path = find_config_path(config_path)
    overrides = _flatten(load_yaml_config(path))

    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(str(e)) from e

    if path is not None:
        logger.info(f"Loaded settings from {path}", extra={"config_path": str(path)})

    return settings
