"""
Input schemas for every exposed MCP operation.

The same pydantic models gate inbound calls and describe the advertised
interface (tools/list inputSchema, prompts/list arguments).
"""

from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from common.exceptions import ValidationError
from common.models import EmailText

ModelT = TypeVar("ModelT", bound=BaseModel)


class OperationInput(BaseModel):
    """Base for operation inputs: unknown arguments are rejected."""

    model_config = ConfigDict(extra="forbid")


# Tool inputs


class CreateUserInput(OperationInput):
    name: str = Field(..., min_length=1, description="Full name of the user")
    email: EmailText = Field(..., description="Email address of the user")
    address: str = Field(..., min_length=1, description="Postal address of the user")
    phone: str = Field(..., min_length=1, description="Phone number of the user")


class UpdateUserInput(OperationInput):
    id: int = Field(..., gt=0, description="ID of the user to update")
    name: Optional[str] = Field(default=None, min_length=1, description="New full name")
    email: Optional[EmailText] = Field(default=None, description="New email address")
    address: Optional[str] = Field(default=None, min_length=1, description="New postal address")
    phone: Optional[str] = Field(default=None, min_length=1, description="New phone number")


class DeleteUserInput(OperationInput):
    id: int = Field(..., gt=0, description="ID of the user to delete")


class GetUserInput(OperationInput):
    id: int = Field(..., gt=0, description="ID of the user to fetch")


# Prompt inputs (MCP sends prompt arguments as strings; lax mode coerces them)


class GenerateFakeUserInput(OperationInput):
    name: str = Field(..., min_length=1, description="Name of the user")


class GenerateUserReportInput(OperationInput):
    userId: int = Field(..., gt=0, description="ID of the user to generate report for")


class GenerateUserListInput(OperationInput):
    format: Literal["table", "list", "json"] = Field(
        default="table", description="Format for the user list"
    )
    limit: Optional[int] = Field(
        default=None, gt=0, le=100, description="Maximum number of users to include"
    )


def validate_arguments(
    model: Type[ModelT], arguments: Optional[Dict[str, Any]], operation: str = ""
) -> ModelT:
    """
    Validate raw arguments against an operation's input model.

    Raises:
        ValidationError: With one "<field>: <message>" entry per failure
    """
    try:
        return model.model_validate(arguments or {})
    except PydanticValidationError as e:
        label = f"Invalid arguments for {operation}" if operation else "Invalid arguments"
        raise ValidationError.from_pydantic(label, e) from e


def _strip_titles(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {key: _strip_titles(value) for key, value in schema.items() if key != "title"}
    if isinstance(schema, list):
        return [_strip_titles(item) for item in schema]
    return schema


def input_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Convert an input model to the JSON Schema advertised by tools/list."""
    schema = model.model_json_schema()
    return {
        "type": "object",
        "properties": _strip_titles(schema.get("properties", {})),
        "required": schema.get("required", []),
        "additionalProperties": False,
    }


def prompt_arguments(model: Type[BaseModel]) -> List[Dict[str, Any]]:
    """Convert an input model to the argument list advertised by prompts/list."""
    arguments = []
    for name, field in model.model_fields.items():
        arguments.append(
            {
                "name": name,
                "description": field.description or "",
                "required": field.is_required(),
            }
        )
    return arguments
