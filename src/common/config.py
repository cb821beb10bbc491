"""
Configuration loader for the user management server.

Settings come from an optional config.yaml, then environment variables
(a .env file is loaded by the process entry point). Environment values win.
Never log the auth flags as if they were enforced - they are not consulted.
"""

import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from common.exceptions import ConfigError

# Project root: src/common/config.py -> src/common -> src -> root
BASE_DIR = Path(__file__).resolve().parents[2]

# Environment variable -> Config field
ENV_VARS: Dict[str, str] = {
    "ENVIRONMENT": "environment",
    "PORT": "port",
    "HOST": "host",
    "MCP_SERVER_NAME": "server_name",
    "MCP_SERVER_VERSION": "server_version",
    "DATA_FILE_PATH": "data_file_path",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
    "ENABLE_AUTH": "enable_auth",
    "DANGEROUSLY_OMIT_AUTH": "dangerously_omit_auth",
}

BOOLEAN_FIELDS = {"enable_auth", "dangerously_omit_auth"}


class Config(BaseModel):
    """Main configuration object."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Deployment environment"
    )
    port: int = Field(default=3000, description="Port for the HTTP transport")
    host: str = Field(default="127.0.0.1", description="Host for the HTTP transport")

    server_name: str = Field(default="mcp-user-management", description="MCP server name")
    server_version: str = Field(default="1.0.0", description="MCP server version")

    data_file_path: str = Field(
        default="src/data/users.json",
        description="User records file (relative paths resolve against the project root)",
    )

    log_level: Literal["debug", "info", "warn", "error"] = Field(
        default="info", description="Logging level"
    )
    log_format: Literal["json", "text"] = Field(default="text", description="Log output shape")

    # Parsed but not enforced anywhere in request handling
    enable_auth: bool = Field(default=False, description="Enable authentication")
    dangerously_omit_auth: bool = Field(
        default=False, description="Explicitly run without authentication"
    )

    @field_validator("log_level", "log_format", "environment", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def _parse_flag(value: Any) -> bool:
    """Only the literal string "true" turns a flag on."""
    if isinstance(value, bool):
        return value
    return str(value).strip() == "true"


def load_config(
    config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Config:
    """
    Load configuration from YAML file and environment.

    Args:
        config_path: Path to config.yaml file. Defaults to ./config.yaml
        environ: Environment mapping. Defaults to os.environ

    Returns:
        Loaded configuration object

    Raises:
        ConfigError: If a value fails validation
    """
    if config_path is None:
        config_path = Path("config.yaml")
    if environ is None:
        environ = os.environ

    config_data: Dict[str, Any] = {}

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Handle nested logging configuration
    if "logging" in config_data:
        logging_config = config_data.pop("logging") or {}
        if "level" in logging_config:
            config_data["log_level"] = logging_config["level"]
        if "format" in logging_config:
            config_data["log_format"] = logging_config["format"]

    for env_name, field_name in ENV_VARS.items():
        if env_name in environ:
            config_data[field_name] = environ[env_name]

    for field_name in BOOLEAN_FIELDS:
        if field_name in config_data:
            config_data[field_name] = _parse_flag(config_data[field_name])

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def get_data_file_path(config: Config) -> Path:
    """Resolve the user records file against the project base directory."""
    path = Path(config.data_file_path)
    if path.is_absolute():
        return path
    return (BASE_DIR / path).resolve()
