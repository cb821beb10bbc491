"""
JSON-RPC 2.0 envelopes and MCP payload models.

Covers the message shapes the user management server reads and writes:
requests, notifications, responses, and the result bodies of the tools,
resources and prompts methods.

Reference: https://www.jsonrpc.org/specification
MCP: https://modelcontextprotocol.io/specification/2025-06-18/basic
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

# Error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
RESOURCE_NOT_FOUND = -32002

RequestId = Union[str, int]


class JSONRPCError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCRequest(BaseModel):
    """A call that expects exactly one response."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCNotification(BaseModel):
    """A call without an id; never answered."""

    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId
    result: Any


class JSONRPCErrorResponse(BaseModel):
    """Error reply; id is None when the request id could not be read."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: Optional[RequestId]
    error: JSONRPCError


JSONRPCMessage = Union[JSONRPCRequest, JSONRPCNotification, JSONRPCResponse, JSONRPCErrorResponse]


class MCPMethods:
    """Method names routed by the server."""

    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    CANCEL = "notifications/cancelled"
    PING = "ping"

    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"

    RESOURCES_LIST = "resources/list"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_READ = "resources/read"

    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"

    LOGGING_SET_LEVEL = "logging/setLevel"


# Handshake


class MCPCapabilities(BaseModel):
    """Server capabilities advertised from initialize."""

    logging: Optional[Dict[str, Any]] = None
    tools: Optional[Dict[str, Any]] = None
    resources: Optional[Dict[str, Any]] = None
    prompts: Optional[Dict[str, Any]] = None


class MCPClientCapabilities(BaseModel):
    """Accepted from the client and otherwise ignored."""

    roots: Optional[Dict[str, Any]] = None
    sampling: Optional[Dict[str, Any]] = None
    elicitation: Optional[Dict[str, Any]] = None


class MCPImplementation(BaseModel):
    name: str
    version: str


class MCPInitializeParams(BaseModel):
    protocolVersion: str
    capabilities: MCPClientCapabilities = Field(default_factory=MCPClientCapabilities)
    clientInfo: MCPImplementation


class MCPInitializeResult(BaseModel):
    protocolVersion: str
    capabilities: MCPCapabilities
    serverInfo: MCPImplementation
    instructions: Optional[str] = None


# Method params


class MCPToolsCallParams(BaseModel):
    name: str
    arguments: Optional[Dict[str, Any]] = None


class MCPResourcesReadParams(BaseModel):
    uri: str


class MCPPromptsGetParams(BaseModel):
    name: str
    arguments: Optional[Dict[str, Any]] = None


class MCPLoggingSetLevelParams(BaseModel):
    level: str


# Result bodies


class MCPTextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class MCPToolsCallResult(BaseModel):
    """tools/call body; structuredContent carries the record when there is one."""

    content: List[MCPTextContent]
    isError: bool = False
    structuredContent: Optional[Dict[str, Any]] = None


class MCPResourceContents(BaseModel):
    uri: str
    text: str
    mimeType: Optional[str] = None


class MCPResourcesReadResult(BaseModel):
    contents: List[MCPResourceContents]


class MCPPromptMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: MCPTextContent


class MCPPromptsGetResult(BaseModel):
    description: Optional[str] = None
    messages: List[MCPPromptMessage]


class JSONRPCHandler:
    """Builds replies and classifies incoming payloads."""

    @staticmethod
    def create_response(id: RequestId, result: Any) -> JSONRPCResponse:
        return JSONRPCResponse(id=id, result=result)

    @staticmethod
    def create_error_response(
        id: Optional[RequestId], code: int, message: str, data: Optional[Any] = None
    ) -> JSONRPCErrorResponse:
        return JSONRPCErrorResponse(id=id, error=JSONRPCError(code=code, message=message, data=data))

    @staticmethod
    def request_id(data: Any) -> Optional[RequestId]:
        """Best-effort id of a raw payload, for replying to a message that failed to parse."""
        if isinstance(data, dict):
            value = data.get("id")
            if isinstance(value, (str, int)) and not isinstance(value, bool):
                return value
        return None

    @staticmethod
    def parse_message(data: Any) -> JSONRPCMessage:
        """
        Classify one decoded JSON value as a JSON-RPC message.

        Raises:
            ValueError: If data is not a JSON-RPC message (pydantic's
                ValidationError is a ValueError too)
        """
        if not isinstance(data, dict):
            raise ValueError(f"Invalid JSON-RPC message: {data}")

        if "method" in data:
            if "id" in data:
                return JSONRPCRequest.model_validate(data)
            return JSONRPCNotification.model_validate(data)
        if "id" in data and "result" in data:
            return JSONRPCResponse.model_validate(data)
        if "id" in data and "error" in data:
            return JSONRPCErrorResponse.model_validate(data)

        raise ValueError(f"Invalid JSON-RPC message: {data}")

    @staticmethod
    def is_batch(data: Any) -> bool:
        return isinstance(data, list)
