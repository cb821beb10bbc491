"""
Shared fixtures: every test gets its own backing file under tmp_path.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from common.config import Config
from services.user_service import UserService
from user_mcp.mcp_server import UserManagementServer

SAMPLE_USERS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "John Doe",
        "email": "john.doe@example.com",
        "address": "123 Main St",
        "phone": "555-0101",
    },
    {
        "id": 4,
        "name": "Jane Smith",
        "email": "jane.smith@example.com",
        "address": "456 Oak Ave",
        "phone": "555-0102",
    },
]


def write_users(path: Path, users: List[Dict[str, Any]]) -> None:
    path.write_text(json.dumps(users, indent=2), encoding="utf-8")


def read_users(path: Path) -> List[Dict[str, Any]]:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """An empty backing file."""
    path = tmp_path / "users.json"
    write_users(path, [])
    return path


@pytest.fixture
def seeded_file(tmp_path: Path) -> Path:
    """A backing file holding SAMPLE_USERS."""
    path = tmp_path / "users.json"
    write_users(path, SAMPLE_USERS)
    return path


@pytest.fixture
def user_service(data_file: Path) -> UserService:
    return UserService(data_file)


@pytest.fixture
def seeded_service(seeded_file: Path) -> UserService:
    return UserService(seeded_file)


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration."""
    return Config(environment="test", data_file_path=str(tmp_path / "users.json"))


@pytest.fixture
def mcp_server(test_config: Config, seeded_service: UserService) -> UserManagementServer:
    """Create MCP server for testing."""
    return UserManagementServer(test_config, user_service=seeded_service)
