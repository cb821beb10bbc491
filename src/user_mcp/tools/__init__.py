"""
MCP Tools Package

User management tools: create, update, delete and get.
"""

from .create_user_tool import CreateUserTool
from .update_user_tool import UpdateUserTool
from .delete_user_tool import DeleteUserTool
from .get_user_tool import GetUserTool

__all__ = [
    "CreateUserTool",
    "UpdateUserTool",
    "DeleteUserTool",
    "GetUserTool",
]
