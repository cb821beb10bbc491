"""
Get User Tool for MCP

Standard MCP Tool: get-user
- Read-only and idempotent
- Returns the record as indented JSON text
"""

import json

from ..schemas import GetUserInput
from ..tool_registry import OutcomeKind, Tool, ToolAnnotations, ToolExecution, ToolHandler
from services.user_service import UserService


class GetUserTool(ToolHandler):
    """Standard MCP tool for fetching one user by id."""

    action = "get"

    def __init__(self, user_service: UserService):
        """Initialize the get user tool."""
        self.user_service = user_service

    def get_tool_definition(self) -> Tool:
        """Get the standard MCP tool definition."""
        return Tool(
            name="get-user",
            title="Get User",
            description="Get a specific user by ID",
            input_model=GetUserInput,
            annotations=ToolAnnotations(
                title="Get User",
                readOnlyHint=True,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=True,
            ),
        )

    async def run(self, params: GetUserInput) -> ToolExecution:
        user = await self.user_service.get_user(params.id)

        if user is None:
            return ToolExecution(
                kind=OutcomeKind.NOT_FOUND, message=f"User with ID {params.id} not found"
            )

        record = user.to_record()
        return ToolExecution(
            kind=OutcomeKind.SUCCESS,
            message=f"User found: {json.dumps(record, indent=2)}",
            data=record,
        )
