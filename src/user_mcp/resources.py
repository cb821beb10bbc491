"""
User resources for MCP

- users (users://all): every stored user as JSON
- users-details (users://{id}/profile): one user as JSON, selected by the
  "id" query parameter, falling back to the {id} path segment
"""

import json
from typing import Dict, Optional
from urllib.parse import parse_qs, urlsplit

from common.exceptions import (
    ResourceError,
    ResourceNotFound,
    ResourceParameterInvalid,
    ResourceParameterMissing,
    UserManagementError,
)
from common.logging import TimedLogger, get_logger
from services.user_service import UserService
from .jsonrpc import MCPResourceContents, MCPResourcesReadResult
from .resource_registry import Resource, ResourceHandler

logger = get_logger(__name__)

JSON_MIME_TYPE = "application/json"


class UsersResource(ResourceHandler):
    """All users."""

    def __init__(self, user_service: UserService):
        self.user_service = user_service

    def get_resource_definition(self) -> Resource:
        return Resource(
            name="users",
            title="Users",
            description="Get all user data from database",
            mime_type=JSON_MIME_TYPE,
            uri="users://all",
        )

    async def read(self, uri: str, variables: Dict[str, str]) -> MCPResourcesReadResult:
        logger.info(event="resource_read_started", resource="users", uri=uri)
        try:
            with TimedLogger(logger, "resource_read_completed", resource="users", uri=uri):
                users = await self.user_service.list_users()
        except UserManagementError as e:
            logger.error(event="resource_read_failed", resource="users", uri=uri, error=str(e))
            raise ResourceError("Failed to retrieve users data") from e

        text = json.dumps([user.to_record() for user in users], indent=2)
        return MCPResourcesReadResult(
            contents=[MCPResourceContents(uri=uri, text=text, mimeType=JSON_MIME_TYPE)]
        )


class UserDetailsResource(ResourceHandler):
    """One user by id."""

    def __init__(self, user_service: UserService):
        self.user_service = user_service

    def get_resource_definition(self) -> Resource:
        return Resource(
            name="users-details",
            title="User Details",
            description="Get user detail data from database",
            mime_type=JSON_MIME_TYPE,
            uri_template="users://{id}/profile",
        )

    @staticmethod
    def parse_user_id(uri: str, variables: Dict[str, str]) -> int:
        """
        Extract the user id from the query string or the template match.

        Raises:
            ResourceParameterMissing: No id anywhere in the URI
            ResourceParameterInvalid: The id is not a positive integer
        """
        query = parse_qs(urlsplit(uri).query)
        raw_id: Optional[str] = query["id"][0] if query.get("id") else variables.get("id")

        if not raw_id:
            raise ResourceParameterMissing("ID parameter is required")

        try:
            user_id = int(raw_id)
        except ValueError:
            raise ResourceParameterInvalid("Invalid ID parameter - must be a number") from None

        if user_id <= 0:
            raise ResourceParameterInvalid("Invalid ID parameter - must be a number")
        return user_id

    async def read(self, uri: str, variables: Dict[str, str]) -> MCPResourcesReadResult:
        try:
            user_id = self.parse_user_id(uri, variables)
            logger.info(event="resource_read_started", resource="users-details", user_id=user_id)

            user = await self.user_service.get_user(user_id)
            if user is None:
                raise ResourceNotFound(f"User with ID {user_id} not found")
        except UserManagementError as e:
            logger.error(
                event="resource_read_failed", resource="users-details", uri=uri, error=str(e)
            )
            raise

        text = json.dumps(user.to_record(), indent=2)
        return MCPResourcesReadResult(
            contents=[MCPResourceContents(uri=uri, text=text, mimeType=JSON_MIME_TYPE)]
        )
