"""
Tool Registry for the MCP Server

Binds tool names to their definitions and handlers, gates every call
through the tool's input schema, and returns an explicit outcome value.

Key Features:
- One-time declarative registration at startup
- Schema-gated execution (pydantic input models)
- Outcome kinds instead of exception identity at the handler boundary
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from common.exceptions import UnknownOperationError, UserManagementError, ValidationError
from common.logging import TimedLogger, get_logger
from .jsonrpc import MCPTextContent, MCPToolsCallResult
from .schemas import input_schema, validate_arguments

logger = get_logger(__name__)


class ToolAnnotations(BaseModel):
    """Behavioral hints advertised with a tool."""

    title: Optional[str] = None
    readOnlyHint: bool = False
    destructiveHint: bool = False
    idempotentHint: bool = False
    openWorldHint: bool = True


class Tool(BaseModel):
    """Standard MCP tool definition."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    title: str
    description: str
    input_model: Type[BaseModel]
    annotations: ToolAnnotations = Field(default_factory=ToolAnnotations)

    def to_mcp(self) -> Dict[str, Any]:
        """Render as a tools/list entry."""
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": input_schema(self.input_model),
            "annotations": self.annotations.model_dump(exclude_none=True),
        }


class OutcomeKind(str, Enum):
    """How a tool call ended."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    FAILED = "failed"


@dataclass
class ToolExecution:
    """Result of tool execution."""

    kind: OutcomeKind
    message: str
    data: Optional[Dict[str, Any]] = None
    execution_time_ms: Optional[float] = None

    @property
    def is_error(self) -> bool:
        return self.kind in (OutcomeKind.INVALID_INPUT, OutcomeKind.FAILED)

    def to_mcp(self) -> Dict[str, Any]:
        """Render into the tools/call content envelope."""
        result = MCPToolsCallResult(
            content=[MCPTextContent(text=self.message)],
            isError=self.is_error,
            structuredContent=self.data,
        )
        return result.model_dump(exclude_none=True)


class ToolHandler(ABC):
    """
    Base class for tool handlers.

    Subclasses implement run(); execute() wraps it with logging and turns
    project errors into a failed outcome so business errors never reach
    the protocol layer.
    """

    # Verb used in failure messages: "Failed to <action> user: ..."
    action: str = "execute"

    @abstractmethod
    def get_tool_definition(self) -> Tool:
        """Get the tool definition for this handler."""

    @abstractmethod
    async def run(self, params: Any) -> ToolExecution:
        """Perform the operation with validated params."""

    async def execute(self, params: BaseModel) -> ToolExecution:
        """Execute the tool with validated params."""
        tool_name = self.get_tool_definition().name
        arguments = params.model_dump(exclude_unset=True, mode="json")

        logger.info(event="tool_call_started", tool_name=tool_name, arguments=arguments)
        try:
            with TimedLogger(logger, "tool_call_completed", tool_name=tool_name) as timer:
                execution = await self.run(params)
        except UserManagementError as e:
            logger.error(
                event="tool_call_failed", tool_name=tool_name, arguments=arguments, error=str(e)
            )
            kind = OutcomeKind.INVALID_INPUT if isinstance(e, ValidationError) else OutcomeKind.FAILED
            return ToolExecution(kind=kind, message=f"Failed to {self.action} user: {e}")

        execution.execution_time_ms = timer.elapsed_ms
        logger.info(event="tool_call_outcome", tool_name=tool_name, outcome=execution.kind.value)
        return execution


class ToolRegistry:
    """Registry for managing MCP tools."""

    def __init__(self):
        """Initialize the tool registry."""
        self.tools: Dict[str, Tool] = {}
        self.handlers: Dict[str, ToolHandler] = {}

    def register(self, handler: ToolHandler) -> Tool:
        """Register a tool with its handler."""
        tool = handler.get_tool_definition()
        self.tools[tool.name] = tool
        self.handlers[tool.name] = handler

        logger.info(
            event="tool_registered",
            tool_name=tool.name,
            handler_type=type(handler).__name__,
            read_only=tool.annotations.readOnlyHint,
            destructive=tool.annotations.destructiveHint,
        )
        return tool

    def list_tools(self) -> List[Tool]:
        """List all registered tools."""
        return list(self.tools.values())

    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """Get a specific tool definition."""
        return self.tools.get(tool_name)

    async def execute_tool(
        self, tool_name: str, arguments: Optional[Dict[str, Any]]
    ) -> ToolExecution:
        """
        Validate arguments and execute a tool.

        Args:
            tool_name: Name of the tool to execute
            arguments: Raw arguments from the caller

        Returns:
            ToolExecution outcome

        Raises:
            UnknownOperationError: If no tool is registered under tool_name
        """
        if tool_name not in self.tools:
            raise UnknownOperationError(
                f"Tool '{tool_name}' not found. Available tools: {list(self.tools.keys())}"
            )

        tool = self.tools[tool_name]
        handler = self.handlers[tool_name]
        start_time = time.perf_counter()

        try:
            params = validate_arguments(tool.input_model, arguments, operation=tool_name)
        except ValidationError as e:
            logger.warning(
                event="tool_arguments_rejected",
                tool_name=tool_name,
                arguments=arguments,
                errors=e.errors,
            )
            return ToolExecution(
                kind=OutcomeKind.INVALID_INPUT,
                message=str(e),
                execution_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )

        return await handler.execute(params)
