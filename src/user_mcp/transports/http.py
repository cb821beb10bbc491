"""
HTTP Transport for MCP

FastAPI app exposing the same JSON-RPC dispatch over HTTP:
- POST /mcp/jsonrpc - single or batch JSON-RPC requests
- GET /health - server summary
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from common.logging import get_logger
from ..jsonrpc import INTERNAL_ERROR, INVALID_REQUEST, PARSE_ERROR, JSONRPCHandler
from ..mcp_server import UserManagementServer

logger = get_logger(__name__)


def create_http_app(mcp_server: UserManagementServer) -> FastAPI:
    """Create the FastAPI app for an MCP server."""
    app = FastAPI(title=mcp_server.server_info.name, version=mcp_server.server_info.version)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return mcp_server.health_check()

    @app.post("/mcp/jsonrpc")
    async def handle_jsonrpc(request: Request) -> Response:
        """Main JSON-RPC endpoint; notifications get 202 with no body."""
        try:
            body = await request.json()
        except ValueError as e:
            error_response = JSONRPCHandler.create_error_response(
                None, PARSE_ERROR, f"Parse error: {str(e)}"
            )
            return JSONResponse(content=error_response.model_dump(), status_code=400)

        try:
            response = await mcp_server.handle_message(body)
        except ValueError as e:
            error_response = JSONRPCHandler.create_error_response(
                None, INVALID_REQUEST, f"Invalid request: {str(e)}"
            )
            return JSONResponse(content=error_response.model_dump(), status_code=400)
        except Exception as e:
            logger.error(event="jsonrpc_handler_error", error=str(e))
            error_response = JSONRPCHandler.create_error_response(
                None, INTERNAL_ERROR, "Internal server error"
            )
            return JSONResponse(content=error_response.model_dump(), status_code=500)

        if response is None:
            return Response(status_code=202)
        if isinstance(response, list):
            return JSONResponse(content=[r.model_dump() for r in response])
        return JSONResponse(content=response.model_dump())

    return app
