"""
Tests for prompt templates and the prompt registry.
"""

import pytest

from common.exceptions import UnknownOperationError, ValidationError
from user_mcp.prompt_registry import PromptRegistry
from user_mcp.prompts import GenerateFakeUserPrompt, GenerateUserListPrompt, GenerateUserReportPrompt


@pytest.fixture
def registry() -> PromptRegistry:
    registry = PromptRegistry()
    registry.register(GenerateFakeUserPrompt())
    registry.register(GenerateUserReportPrompt())
    registry.register(GenerateUserListPrompt())
    return registry


def test_prompt_listing(registry: PromptRegistry):
    prompts = {prompt.name: prompt.to_mcp() for prompt in registry.list_prompts()}

    assert set(prompts) == {"generate-fake-user", "generate-user-report", "generate-user-list"}
    assert prompts["generate-fake-user"]["arguments"] == [
        {"name": "name", "description": "Name of the user", "required": True}
    ]
    assert prompts["generate-user-report"]["arguments"][0]["name"] == "userId"


@pytest.mark.asyncio
async def test_generate_fake_user(registry: PromptRegistry):
    result = await registry.get_prompt("generate-fake-user", {"name": "Ada"})

    message = result.messages[0]
    assert message.role == "user"
    assert message.content.type == "text"
    assert message.content.text.startswith('Generate a fake user with the name "Ada"')
    assert '"email": "string (valid email format)"' in message.content.text


@pytest.mark.asyncio
async def test_generate_user_report(registry: PromptRegistry):
    result = await registry.get_prompt("generate-user-report", {"userId": "7"})

    text = result.messages[0].content.text
    assert text.startswith("Generate a detailed report for user with ID 7.")
    assert "4. Recommendations or suggestions" in text


@pytest.mark.asyncio
async def test_generate_user_list_defaults(registry: PromptRegistry):
    result = await registry.get_prompt("generate-user-list", {})

    text = result.messages[0].content.text
    assert text.startswith("Generate a user list in table format. Include")


@pytest.mark.asyncio
async def test_generate_user_list_with_limit(registry: PromptRegistry):
    result = await registry.get_prompt("generate-user-list", {"format": "json", "limit": "10"})

    text = result.messages[0].content.text
    assert text.startswith("Generate a user list in json format (limit to 10 users).")


@pytest.mark.asyncio
async def test_invalid_prompt_arguments(registry: PromptRegistry):
    with pytest.raises(ValidationError):
        await registry.get_prompt("generate-user-report", {"userId": "-1"})

    with pytest.raises(ValidationError):
        await registry.get_prompt("generate-fake-user", {})


@pytest.mark.asyncio
async def test_render_failure_is_reraised(registry: PromptRegistry, monkeypatch):
    def broken(self, params):
        raise RuntimeError("template exploded")

    monkeypatch.setattr(GenerateFakeUserPrompt, "render", broken)

    with pytest.raises(RuntimeError, match="template exploded"):
        await registry.get_prompt("generate-fake-user", {"name": "Ada"})


@pytest.mark.asyncio
async def test_unknown_prompt(registry: PromptRegistry):
    with pytest.raises(UnknownOperationError):
        await registry.get_prompt("generate-invoice", {})


@pytest.mark.asyncio
async def test_multiline_argument_does_not_disturb_layout(registry: PromptRegistry):
    result = await registry.get_prompt("generate-fake-user", {"name": "Ada\nLovelace {x}"})

    text = result.messages[0].content.text
    assert text.startswith('Generate a fake user with the name "Ada\nLovelace {x}"')
    assert "\n{\n" in text
    assert text.endswith("\nMake sure the data is realistic and properly formatted.")
    assert not any(line.startswith("    ") for line in text.splitlines())
