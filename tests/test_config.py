"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from common.config import BASE_DIR, Config, get_data_file_path, load_config
from common.exceptions import ConfigError


def test_config_defaults():
    """Test default values are loaded."""
    config = Config()

    assert config.environment == "development"
    assert config.port == 3000
    assert config.server_name == "mcp-user-management"
    assert config.server_version == "1.0.0"
    assert config.data_file_path == "src/data/users.json"
    assert config.log_level == "info"
    assert config.log_format == "text"
    assert config.enable_auth is False
    assert config.dangerously_omit_auth is False


def test_load_config_without_file_or_env(tmp_path: Path):
    """Missing config.yaml and empty environment give defaults."""
    config = load_config(tmp_path / "missing.yaml", environ={})
    assert config == Config()


def test_load_config_from_environment(tmp_path: Path):
    """Environment variables override defaults."""
    environ = {
        "ENVIRONMENT": "production",
        "PORT": "8080",
        "MCP_SERVER_NAME": "users",
        "MCP_SERVER_VERSION": "2.0.0",
        "DATA_FILE_PATH": "/var/lib/users.json",
        "LOG_LEVEL": "debug",
        "LOG_FORMAT": "json",
        "ENABLE_AUTH": "true",
    }
    config = load_config(tmp_path / "missing.yaml", environ=environ)

    assert config.environment == "production"
    assert config.port == 8080
    assert config.server_name == "users"
    assert config.server_version == "2.0.0"
    assert config.data_file_path == "/var/lib/users.json"
    assert config.log_level == "debug"
    assert config.log_format == "json"
    assert config.enable_auth is True
    assert config.dangerously_omit_auth is False


@pytest.mark.parametrize("value", ["TRUE", "1", "yes", "false", ""])
def test_auth_flags_only_accept_literal_true(tmp_path: Path, value: str):
    config = load_config(tmp_path / "missing.yaml", environ={"DANGEROUSLY_OMIT_AUTH": value})
    assert config.dangerously_omit_auth is False


def test_yaml_file_is_overridden_by_environment(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "port: 4000\nserver_name: from-yaml\nlogging:\n  level: warn\n  format: json\n",
        encoding="utf-8",
    )

    config = load_config(config_path, environ={"PORT": "5000"})

    assert config.port == 5000
    assert config.server_name == "from-yaml"
    assert config.log_level == "warn"
    assert config.log_format == "json"


def test_invalid_values_raise_config_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml", environ={"LOG_LEVEL": "verbose"})

    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml", environ={"ENVIRONMENT": "staging"})


def test_data_file_path_resolution(tmp_path: Path):
    relative = Config(data_file_path="src/data/users.json")
    assert get_data_file_path(relative) == (BASE_DIR / "src" / "data" / "users.json").resolve()

    absolute = Config(data_file_path=str(tmp_path / "users.json"))
    assert get_data_file_path(absolute) == tmp_path / "users.json"


def test_config_yaml_file_exists():
    """The project ships a config.yaml with the defaults."""
    config = load_config(BASE_DIR / "config.yaml", environ={})
    assert config == Config()
