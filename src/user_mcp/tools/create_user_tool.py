"""
Create User Tool for MCP

Standard MCP Tool: create-user
- Validates name, email, address and phone
- Assigns the next free id
- Appends the record to the user store
"""

from ..schemas import CreateUserInput
from ..tool_registry import OutcomeKind, Tool, ToolAnnotations, ToolExecution, ToolHandler
from common.models import UserCreate
from services.user_service import UserService


class CreateUserTool(ToolHandler):
    """Standard MCP tool for creating a user."""

    action = "create"

    def __init__(self, user_service: UserService):
        """Initialize the create user tool."""
        self.user_service = user_service

    def get_tool_definition(self) -> Tool:
        """Get the standard MCP tool definition."""
        return Tool(
            name="create-user",
            title="Create User",
            description="Create a new user in the database",
            input_model=CreateUserInput,
            annotations=ToolAnnotations(
                title="Create User",
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=False,
                openWorldHint=True,
            ),
        )

    async def run(self, params: CreateUserInput) -> ToolExecution:
        user = await self.user_service.create_user(UserCreate(**params.model_dump()))

        return ToolExecution(
            kind=OutcomeKind.SUCCESS,
            message=f'User "{user.name}" created successfully with ID {user.id}',
            data=user.to_record(),
        )
