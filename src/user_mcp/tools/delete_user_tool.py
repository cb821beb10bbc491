"""
Delete User Tool for MCP

Standard MCP Tool: delete-user
- Removes the record entirely
- Marked destructive in the tool annotations
"""

from ..schemas import DeleteUserInput
from ..tool_registry import OutcomeKind, Tool, ToolAnnotations, ToolExecution, ToolHandler
from services.user_service import UserService


class DeleteUserTool(ToolHandler):
    """Standard MCP tool for deleting a user."""

    action = "delete"

    def __init__(self, user_service: UserService):
        """Initialize the delete user tool."""
        self.user_service = user_service

    def get_tool_definition(self) -> Tool:
        """Get the standard MCP tool definition."""
        return Tool(
            name="delete-user",
            title="Delete User",
            description="Delete a user from the database",
            input_model=DeleteUserInput,
            annotations=ToolAnnotations(
                title="Delete User",
                readOnlyHint=False,
                destructiveHint=True,
                idempotentHint=False,
                openWorldHint=True,
            ),
        )

    async def run(self, params: DeleteUserInput) -> ToolExecution:
        deleted = await self.user_service.delete_user(params.id)

        if not deleted:
            return ToolExecution(
                kind=OutcomeKind.NOT_FOUND, message=f"User with ID {params.id} not found"
            )

        return ToolExecution(
            kind=OutcomeKind.SUCCESS, message=f"User with ID {params.id} deleted successfully"
        )
