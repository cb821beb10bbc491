"""
Tests for user resources and URI routing.
"""

import json

import pytest

from common.exceptions import (
    ResourceError,
    ResourceNotFound,
    ResourceParameterInvalid,
    ResourceParameterMissing,
    StorageReadError,
    UnknownOperationError,
)
from services.user_service import UserService
from user_mcp.resource_registry import ResourceRegistry, compile_template
from user_mcp.resources import UserDetailsResource, UsersResource
from conftest import SAMPLE_USERS


@pytest.fixture
def registry(seeded_service: UserService) -> ResourceRegistry:
    registry = ResourceRegistry()
    registry.register(UsersResource(seeded_service))
    registry.register(UserDetailsResource(seeded_service))
    return registry


def test_compile_template():
    pattern = compile_template("users://{id}/profile")

    assert pattern.match("users://12/profile").groupdict() == {"id": "12"}
    assert pattern.match("users://12/profile/extra") is None
    assert pattern.match("users://all") is None


def test_listing_separates_fixed_and_templates(registry: ResourceRegistry):
    fixed = [r.to_mcp() for r in registry.list_resources()]
    templates = [r.to_mcp() for r in registry.list_templates()]

    assert fixed == [
        {
            "name": "users",
            "title": "Users",
            "description": "Get all user data from database",
            "mimeType": "application/json",
            "uri": "users://all",
        }
    ]
    assert templates[0]["uriTemplate"] == "users://{id}/profile"
    assert templates[0]["name"] == "users-details"


@pytest.mark.asyncio
async def test_read_all_users(registry: ResourceRegistry):
    result = await registry.read("users://all")

    content = result.contents[0]
    assert content.uri == "users://all"
    assert content.mimeType == "application/json"
    assert json.loads(content.text) == SAMPLE_USERS


@pytest.mark.asyncio
async def test_read_all_users_hides_storage_detail(registry: ResourceRegistry, monkeypatch):
    async def broken(self):
        raise StorageReadError("Failed to parse users file")

    monkeypatch.setattr(UserService, "list_users", broken)

    with pytest.raises(ResourceError) as exc_info:
        await registry.read("users://all")
    assert str(exc_info.value) == "Failed to retrieve users data"


@pytest.mark.asyncio
async def test_read_user_by_query_parameter(registry: ResourceRegistry):
    result = await registry.read("users://4/profile?id=4")

    assert result.contents[0].uri == "users://4/profile?id=4"
    assert json.loads(result.contents[0].text)["name"] == "Jane Smith"


@pytest.mark.asyncio
async def test_query_parameter_wins_over_path(registry: ResourceRegistry):
    result = await registry.read("users://4/profile?id=1")
    assert json.loads(result.contents[0].text)["id"] == 1


@pytest.mark.asyncio
async def test_read_user_by_path_segment(registry: ResourceRegistry):
    result = await registry.read("users://1/profile")
    assert json.loads(result.contents[0].text)["name"] == "John Doe"


@pytest.mark.asyncio
async def test_non_numeric_id_is_rejected(registry: ResourceRegistry):
    with pytest.raises(ResourceParameterInvalid) as exc_info:
        await registry.read("users://1/profile?id=abc")
    assert str(exc_info.value) == "Invalid ID parameter - must be a number"


@pytest.mark.asyncio
async def test_non_positive_id_is_rejected(registry: ResourceRegistry):
    with pytest.raises(ResourceParameterInvalid):
        await registry.read("users://0/profile")


@pytest.mark.asyncio
async def test_missing_user(registry: ResourceRegistry):
    with pytest.raises(ResourceNotFound) as exc_info:
        await registry.read("users://99/profile")
    assert str(exc_info.value) == "User with ID 99 not found"


def test_missing_parameter():
    with pytest.raises(ResourceParameterMissing) as exc_info:
        UserDetailsResource.parse_user_id("users://profile", {})
    assert str(exc_info.value) == "ID parameter is required"


@pytest.mark.asyncio
async def test_unknown_uri(registry: ResourceRegistry):
    with pytest.raises(UnknownOperationError):
        await registry.read("orders://all")
