"""
Update User Tool for MCP

Standard MCP Tool: update-user
- Partial update: only supplied fields change
- The id itself is never modified
- Reports absence as a normal result, not an error
"""

from ..schemas import UpdateUserInput
from ..tool_registry import OutcomeKind, Tool, ToolAnnotations, ToolExecution, ToolHandler
from common.models import UserUpdate
from services.user_service import UserService


class UpdateUserTool(ToolHandler):
    """Standard MCP tool for updating an existing user."""

    action = "update"

    def __init__(self, user_service: UserService):
        """Initialize the update user tool."""
        self.user_service = user_service

    def get_tool_definition(self) -> Tool:
        """Get the standard MCP tool definition."""
        return Tool(
            name="update-user",
            title="Update User",
            description="Update an existing user in the database",
            input_model=UpdateUserInput,
            annotations=ToolAnnotations(
                title="Update User",
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=False,
                openWorldHint=True,
            ),
        )

    async def run(self, params: UpdateUserInput) -> ToolExecution:
        changes = params.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        user = await self.user_service.update_user(params.id, UserUpdate(**changes))

        if user is None:
            return ToolExecution(
                kind=OutcomeKind.NOT_FOUND, message=f"User with ID {params.id} not found"
            )

        return ToolExecution(
            kind=OutcomeKind.SUCCESS,
            message=f'User "{user.name}" (ID: {params.id}) updated successfully',
            data=user.to_record(),
        )
