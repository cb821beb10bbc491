"""
MCP User Management Server

Composes the tool, resource and prompt registries and routes JSON-RPC
requests to them:
- JSON-RPC 2.0 protocol wrapper
- Initialize/capabilities handshake
- tools/*, resources/* and prompts/* methods
- Runtime log level changes

Transports (stdio, HTTP) only move messages; all dispatch lives here.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from common.config import Config, get_data_file_path
from common.exceptions import (
    ResourceNotFound,
    ResourceParameterInvalid,
    ResourceParameterMissing,
    ResourceError,
    UnknownOperationError,
    ValidationError,
)
from common.logging import get_logger, set_log_level
from services.user_service import UserService
from .jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    RESOURCE_NOT_FOUND,
    JSONRPCErrorResponse,
    JSONRPCHandler,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    MCPCapabilities,
    MCPImplementation,
    MCPInitializeParams,
    MCPInitializeResult,
    MCPLoggingSetLevelParams,
    MCPMethods,
    MCPPromptsGetParams,
    MCPResourcesReadParams,
    MCPToolsCallParams,
)
from .prompt_registry import PromptRegistry
from .prompts import GenerateFakeUserPrompt, GenerateUserListPrompt, GenerateUserReportPrompt
from .resource_registry import ResourceRegistry
from .resources import UserDetailsResource, UsersResource
from .tool_registry import ToolRegistry
from .tools import CreateUserTool, DeleteUserTool, GetUserTool, UpdateUserTool

logger = get_logger(__name__)

# MCP Protocol version
MCP_PROTOCOL_VERSION = "2025-06-18"

# MCP logging levels -> configured level names
MCP_LOG_LEVELS = {
    "debug": "debug",
    "info": "info",
    "notice": "info",
    "warning": "warn",
    "error": "error",
    "critical": "error",
    "alert": "error",
    "emergency": "error",
}

RPCResult = Union[JSONRPCResponse, JSONRPCErrorResponse]


class UserManagementServer:
    """
    MCP server exposing user management tools, resources and prompts.

    Registration happens once, in the constructor. The user store is
    injected so tests can point the server at a temporary file.
    """

    def __init__(self, config: Optional[Config] = None, user_service: Optional[UserService] = None):
        """Initialize the server and register every operation."""
        self.config = config or Config()
        self.user_service = user_service or UserService(get_data_file_path(self.config))

        self.tool_registry = ToolRegistry()
        self.resource_registry = ResourceRegistry()
        self.prompt_registry = PromptRegistry()

        self.capabilities = MCPCapabilities(
            tools={"listChanged": False},
            resources={"subscribe": False, "listChanged": False},
            prompts={"listChanged": False},
            logging={},
        )
        self.server_info = MCPImplementation(
            name=self.config.server_name, version=self.config.server_version
        )

        self._register_operations()

    def _register_operations(self) -> None:
        """Bind every resource, tool and prompt to its handler."""
        for resource in (UsersResource(self.user_service), UserDetailsResource(self.user_service)):
            self.resource_registry.register(resource)

        for tool in (
            CreateUserTool(self.user_service),
            UpdateUserTool(self.user_service),
            DeleteUserTool(self.user_service),
            GetUserTool(self.user_service),
        ):
            self.tool_registry.register(tool)

        for prompt in (
            GenerateFakeUserPrompt(),
            GenerateUserReportPrompt(),
            GenerateUserListPrompt(),
        ):
            self.prompt_registry.register(prompt)

        logger.info(
            event="mcp_server_created",
            message="MCP Server created with all tools, resources, and prompts registered",
            tools=len(self.tool_registry.tools),
            resources=len(self.resource_registry.resources),
            prompts=len(self.prompt_registry.prompts),
        )

    async def handle_message(self, data: Any) -> Optional[Union[RPCResult, List[RPCResult]]]:
        """
        Handle a decoded JSON-RPC payload (single message or batch).

        Returns the response(s) to send back, or None when nothing is owed
        (notifications, or a batch made only of notifications). Inside a
        batch each malformed item gets its own -32600 reply; an empty batch
        gets a single one.

        Raises:
            ValueError: If a single (non-batch) payload is not a valid JSON-RPC message
        """
        if not JSONRPCHandler.is_batch(data):
            return await self._dispatch(JSONRPCHandler.parse_message(data))

        if not data:
            return JSONRPCHandler.create_error_response(
                None, INVALID_REQUEST, "Invalid request: empty batch"
            )

        responses = []
        for item in data:
            try:
                message = JSONRPCHandler.parse_message(item)
            except ValueError as e:
                logger.warning(event="invalid_batch_item", error=str(e))
                responses.append(
                    JSONRPCHandler.create_error_response(
                        JSONRPCHandler.request_id(item), INVALID_REQUEST, f"Invalid request: {e}"
                    )
                )
                continue

            response = await self._dispatch(message)
            if response is not None:
                responses.append(response)
        return responses or None

    async def _dispatch(self, message: Any) -> Optional[RPCResult]:
        if isinstance(message, JSONRPCRequest):
            return await self._handle_request(message)
        if isinstance(message, JSONRPCNotification):
            await self._handle_notification(message)
            return None
        # Responses from the client are not expected by this server
        logger.warning(event="unexpected_message", message_type=type(message).__name__)
        return None

    async def _handle_request(self, request: JSONRPCRequest) -> RPCResult:
        """Handle a JSON-RPC request."""
        logger.debug(event="jsonrpc_request", method=request.method, id=request.id)

        handlers = {
            MCPMethods.INITIALIZE: self._handle_initialize,
            MCPMethods.PING: self._handle_ping,
            MCPMethods.TOOLS_LIST: self._handle_tools_list,
            MCPMethods.TOOLS_CALL: self._handle_tools_call,
            MCPMethods.RESOURCES_LIST: self._handle_resources_list,
            MCPMethods.RESOURCES_TEMPLATES_LIST: self._handle_resource_templates_list,
            MCPMethods.RESOURCES_READ: self._handle_resources_read,
            MCPMethods.PROMPTS_LIST: self._handle_prompts_list,
            MCPMethods.PROMPTS_GET: self._handle_prompts_get,
            MCPMethods.LOGGING_SET_LEVEL: self._handle_set_level,
        }
        handler = handlers.get(request.method)
        if handler is None:
            return JSONRPCHandler.create_error_response(
                request.id, METHOD_NOT_FOUND, f"Method '{request.method}' not found"
            )

        try:
            return await handler(request)
        except PydanticValidationError as e:
            return JSONRPCHandler.create_error_response(
                request.id,
                INVALID_PARAMS,
                f"Invalid params for '{request.method}'",
                e.errors(include_url=False, include_context=False, include_input=False),
            )
        except Exception as e:
            logger.error(
                event="request_handler_error",
                method=request.method,
                params=request.params,
                error=str(e),
                error_type=type(e).__name__,
            )
            return JSONRPCHandler.create_error_response(
                request.id, INTERNAL_ERROR, f"Internal error: {str(e)}"
            )

    async def _handle_notification(self, notification: JSONRPCNotification) -> None:
        """Handle a JSON-RPC notification."""
        logger.debug(event="jsonrpc_notification", method=notification.method)

        if notification.method == MCPMethods.INITIALIZED:
            logger.info(event="client_ready", message="Client has completed initialization")
        elif notification.method == MCPMethods.CANCEL:
            # Requests run to completion; cancellation is only recorded
            request_id = (notification.params or {}).get("requestId")
            logger.info(event="request_cancel_ignored", request_id=request_id)
        else:
            logger.warning(event="unknown_notification", method=notification.method)

    async def _handle_initialize(self, request: JSONRPCRequest) -> RPCResult:
        """Handle initialize request - capability negotiation."""
        if not request.params:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, "Initialize requires params"
            )

        params = MCPInitializeParams.model_validate(request.params)

        if params.protocolVersion != MCP_PROTOCOL_VERSION:
            logger.warning(
                event="protocol_version_mismatch",
                client_version=params.protocolVersion,
                server_version=MCP_PROTOCOL_VERSION,
            )

        result = MCPInitializeResult(
            protocolVersion=MCP_PROTOCOL_VERSION,
            capabilities=self.capabilities,
            serverInfo=self.server_info,
            instructions=(
                "This MCP server manages user records. Use the create-user, update-user, "
                "delete-user and get-user tools to change or inspect users, read users://all "
                "or users://{id}/profile for JSON data, and use the prompts to draft fake "
                "users, reports and lists."
            ),
        )

        logger.info(
            event="client_initialized",
            client_info=params.clientInfo.model_dump(),
            protocol_version=params.protocolVersion,
        )
        return JSONRPCHandler.create_response(request.id, result.model_dump(exclude_none=True))

    async def _handle_ping(self, request: JSONRPCRequest) -> RPCResult:
        return JSONRPCHandler.create_response(request.id, {})

    async def _handle_tools_list(self, request: JSONRPCRequest) -> RPCResult:
        tools = [tool.to_mcp() for tool in self.tool_registry.list_tools()]
        return JSONRPCHandler.create_response(request.id, {"tools": tools})

    async def _handle_tools_call(self, request: JSONRPCRequest) -> RPCResult:
        """Handle tools/call request."""
        if not request.params:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, "Tool call requires params"
            )

        params = MCPToolsCallParams.model_validate(request.params)
        try:
            execution = await self.tool_registry.execute_tool(params.name, params.arguments)
        except UnknownOperationError as e:
            return JSONRPCHandler.create_error_response(request.id, INVALID_PARAMS, str(e))

        return JSONRPCHandler.create_response(request.id, execution.to_mcp())

    async def _handle_resources_list(self, request: JSONRPCRequest) -> RPCResult:
        resources = [r.to_mcp() for r in self.resource_registry.list_resources()]
        return JSONRPCHandler.create_response(request.id, {"resources": resources})

    async def _handle_resource_templates_list(self, request: JSONRPCRequest) -> RPCResult:
        templates = [r.to_mcp() for r in self.resource_registry.list_templates()]
        return JSONRPCHandler.create_response(request.id, {"resourceTemplates": templates})

    async def _handle_resources_read(self, request: JSONRPCRequest) -> RPCResult:
        """Handle resources/read request."""
        params = MCPResourcesReadParams.model_validate(request.params or {})
        try:
            result = await self.resource_registry.read(params.uri)
        except (ResourceParameterMissing, ResourceParameterInvalid) as e:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, str(e), {"uri": params.uri}
            )
        except (ResourceNotFound, UnknownOperationError) as e:
            return JSONRPCHandler.create_error_response(
                request.id, RESOURCE_NOT_FOUND, str(e), {"uri": params.uri}
            )
        except ResourceError as e:
            return JSONRPCHandler.create_error_response(
                request.id, INTERNAL_ERROR, str(e), {"uri": params.uri}
            )

        return JSONRPCHandler.create_response(request.id, result.model_dump(exclude_none=True))

    async def _handle_prompts_list(self, request: JSONRPCRequest) -> RPCResult:
        prompts = [p.to_mcp() for p in self.prompt_registry.list_prompts()]
        return JSONRPCHandler.create_response(request.id, {"prompts": prompts})

    async def _handle_prompts_get(self, request: JSONRPCRequest) -> RPCResult:
        """Handle prompts/get request."""
        params = MCPPromptsGetParams.model_validate(request.params or {})
        try:
            result = await self.prompt_registry.get_prompt(params.name, params.arguments)
        except (UnknownOperationError, ValidationError) as e:
            data = e.errors if isinstance(e, ValidationError) else None
            return JSONRPCHandler.create_error_response(request.id, INVALID_PARAMS, str(e), data)

        return JSONRPCHandler.create_response(request.id, result.model_dump(exclude_none=True))

    async def _handle_set_level(self, request: JSONRPCRequest) -> RPCResult:
        params = MCPLoggingSetLevelParams.model_validate(request.params or {})
        level = MCP_LOG_LEVELS.get(params.level.lower())
        if level is None:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, f"Unknown log level '{params.level}'"
            )

        set_log_level(level)
        logger.info(event="log_level_changed", level=level)
        return JSONRPCHandler.create_response(request.id, {})

    def health_check(self) -> Dict[str, Any]:
        """Health summary for the HTTP transport."""
        return {
            "status": "healthy",
            "server": self.server_info.model_dump(),
            "protocol_version": MCP_PROTOCOL_VERSION,
            "tools_count": len(self.tool_registry.tools),
            "resources_count": len(self.resource_registry.resources),
            "prompts_count": len(self.prompt_registry.prompts),
            "data_file": str(self.user_service.data_file_path),
        }
