"""
Prompt Registry for the MCP Server

Prompts are schema-gated template renderers; they never touch the store.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict

from common.exceptions import UnknownOperationError, ValidationError
from common.logging import get_logger
from .jsonrpc import MCPPromptMessage, MCPPromptsGetResult, MCPTextContent
from .schemas import prompt_arguments, validate_arguments

logger = get_logger(__name__)


class Prompt(BaseModel):
    """Standard MCP prompt definition."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    input_model: Type[BaseModel]

    def to_mcp(self) -> Dict[str, Any]:
        """Render as a prompts/list entry."""
        return {
            "name": self.name,
            "description": self.description,
            "arguments": prompt_arguments(self.input_model),
        }


class PromptHandler(ABC):
    """Abstract base class for prompt renderers."""

    @abstractmethod
    def get_prompt_definition(self) -> Prompt:
        """Get the prompt definition for this handler."""

    @abstractmethod
    def render(self, params: Any) -> str:
        """Render the instruction text for validated params."""

    async def get(self, params: BaseModel) -> MCPPromptsGetResult:
        """Render params into a single user message."""
        prompt = self.get_prompt_definition()
        arguments = params.model_dump(mode="json")

        logger.info(event="prompt_render_started", prompt_name=prompt.name, arguments=arguments)
        try:
            text = self.render(params)
        except Exception as e:
            logger.error(
                event="prompt_render_failed",
                prompt_name=prompt.name,
                arguments=arguments,
                error=str(e),
            )
            raise

        return MCPPromptsGetResult(
            description=prompt.description,
            messages=[MCPPromptMessage(role="user", content=MCPTextContent(text=text))],
        )


class PromptRegistry:
    """Registry for managing MCP prompts."""

    def __init__(self):
        """Initialize the prompt registry."""
        self.prompts: Dict[str, Prompt] = {}
        self.handlers: Dict[str, PromptHandler] = {}

    def register(self, handler: PromptHandler) -> Prompt:
        """Register a prompt with its handler."""
        prompt = handler.get_prompt_definition()
        self.prompts[prompt.name] = prompt
        self.handlers[prompt.name] = handler

        logger.info(
            event="prompt_registered",
            prompt_name=prompt.name,
            arguments=[arg["name"] for arg in prompt_arguments(prompt.input_model)],
        )
        return prompt

    def list_prompts(self) -> List[Prompt]:
        """List all registered prompts."""
        return list(self.prompts.values())

    async def get_prompt(
        self, prompt_name: str, arguments: Optional[Dict[str, Any]]
    ) -> MCPPromptsGetResult:
        """
        Validate arguments and render a prompt.

        Raises:
            UnknownOperationError: If no prompt is registered under prompt_name
            ValidationError: If arguments fail the prompt's schema
        """
        if prompt_name not in self.prompts:
            raise UnknownOperationError(f"Prompt '{prompt_name}' not found")

        prompt = self.prompts[prompt_name]
        try:
            params = validate_arguments(prompt.input_model, arguments, operation=prompt_name)
        except ValidationError as e:
            logger.warning(
                event="prompt_arguments_rejected",
                prompt_name=prompt_name,
                arguments=arguments,
                errors=e.errors,
            )
            raise

        return await self.handlers[prompt_name].get(params)
