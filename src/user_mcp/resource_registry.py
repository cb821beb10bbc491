"""
Resource Registry for the MCP Server

Holds fixed-URI resources and URI-template resources, and routes a
resources/read URI to the handler that owns it.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Pattern, Tuple

from pydantic import BaseModel

from common.exceptions import UnknownOperationError
from common.logging import get_logger
from .jsonrpc import MCPResourcesReadResult

logger = get_logger(__name__)

_TEMPLATE_VARIABLE = re.compile(r"\{(\w+)\}")


class Resource(BaseModel):
    """Resource definition: exactly one of uri / uri_template is set."""

    name: str
    title: str
    description: str
    mime_type: str = "application/json"
    uri: Optional[str] = None
    uri_template: Optional[str] = None

    @property
    def is_template(self) -> bool:
        return self.uri_template is not None

    def to_mcp(self) -> Dict[str, Any]:
        """Render as a resources/list or resources/templates/list entry."""
        entry: Dict[str, Any] = {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "mimeType": self.mime_type,
        }
        if self.is_template:
            entry["uriTemplate"] = self.uri_template
        else:
            entry["uri"] = self.uri
        return entry


class ResourceHandler(ABC):
    """Abstract base class for resource readers."""

    @abstractmethod
    def get_resource_definition(self) -> Resource:
        """Get the resource definition for this handler."""

    @abstractmethod
    async def read(self, uri: str, variables: Dict[str, str]) -> MCPResourcesReadResult:
        """Read the resource at uri; variables holds template matches."""


def compile_template(template: str) -> Pattern[str]:
    """Compile a level-1 URI template ("users://{id}/profile") into a regex."""
    pattern = ""
    position = 0
    for match in _TEMPLATE_VARIABLE.finditer(template):
        pattern += re.escape(template[position : match.start()])
        pattern += f"(?P<{match.group(1)}>[^/?#]+)"
        position = match.end()
    pattern += re.escape(template[position:])
    return re.compile(f"^{pattern}$")


class ResourceRegistry:
    """Registry for fixed and templated MCP resources."""

    def __init__(self):
        """Initialize the resource registry."""
        self.resources: Dict[str, Resource] = {}
        self.handlers: Dict[str, ResourceHandler] = {}
        self._templates: List[Tuple[Pattern[str], str]] = []

    def register(self, handler: ResourceHandler) -> Resource:
        """Register a resource with its handler."""
        resource = handler.get_resource_definition()
        self.resources[resource.name] = resource
        self.handlers[resource.name] = handler

        if resource.is_template:
            self._templates.append((compile_template(resource.uri_template), resource.name))

        logger.info(
            event="resource_registered",
            resource_name=resource.name,
            uri=resource.uri,
            uri_template=resource.uri_template,
        )
        return resource

    def list_resources(self) -> List[Resource]:
        """List fixed-URI resources."""
        return [r for r in self.resources.values() if not r.is_template]

    def list_templates(self) -> List[Resource]:
        """List URI-template resources."""
        return [r for r in self.resources.values() if r.is_template]

    def resolve(self, uri: str) -> Tuple[ResourceHandler, Dict[str, str]]:
        """
        Find the handler for a URI.

        Fixed URIs match exactly; templates match the URI without its query.

        Raises:
            UnknownOperationError: If nothing matches
        """
        for resource in self.list_resources():
            if resource.uri == uri:
                return self.handlers[resource.name], {}

        base_uri = uri.split("?", 1)[0]
        for resource in self.list_resources():
            if resource.uri == base_uri:
                return self.handlers[resource.name], {}

        for pattern, name in self._templates:
            match = pattern.match(base_uri)
            if match:
                return self.handlers[name], match.groupdict()

        raise UnknownOperationError(f"Resource '{uri}' not found")

    async def read(self, uri: str) -> MCPResourcesReadResult:
        """Read a resource by URI."""
        handler, variables = self.resolve(uri)
        return await handler.read(uri, variables)
