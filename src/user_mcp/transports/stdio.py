"""
Standard I/O Transport for MCP

Reads newline-delimited JSON-RPC messages from stdin and writes one JSON
line per response to stdout. Logging goes to stderr, never stdout.

Reference: https://modelcontextprotocol.io/specification/2025-06-18/basic/transports
"""

import asyncio
import json
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, TextIO

from pydantic import BaseModel

from common.logging import get_logger
from ..jsonrpc import INTERNAL_ERROR, INVALID_REQUEST, PARSE_ERROR, JSONRPCHandler
from ..mcp_server import UserManagementServer

logger = get_logger(__name__)


def encode(payload: Any) -> str:
    """Serialize a response (or batch of responses) as one compact JSON line."""
    if isinstance(payload, list):
        data = [item.model_dump() if isinstance(item, BaseModel) else item for item in payload]
    elif isinstance(payload, BaseModel):
        data = payload.model_dump()
    else:
        data = payload
    return json.dumps(data, separators=(",", ":"))


class StdioTransport:
    """
    Standard I/O transport for MCP communication.

    Requests are handled strictly one at a time, in arrival order.
    """

    def __init__(
        self,
        mcp_server: UserManagementServer,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        """Initialize stdio transport."""
        self.mcp_server = mcp_server
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="stdio")
        self.running = False

    async def run(self) -> None:
        """Serve until EOF on stdin."""
        self.running = True
        logger.info(event="stdio_transport_started", message="MCP stdio transport started")
        loop = asyncio.get_running_loop()

        try:
            while self.running:
                line = await loop.run_in_executor(self.executor, self.stdin.readline)

                if not line:  # EOF
                    logger.info(event="stdio_eof", message="Received EOF, shutting down")
                    break

                line = line.strip()
                if not line:
                    continue

                await self.handle_line(line)
        finally:
            self.running = False
            self.executor.shutdown(wait=False)
            logger.info(event="stdio_transport_stopped")

    def stop(self) -> None:
        """Stop after the current message."""
        self.running = False

    async def handle_line(self, line: str) -> None:
        """Handle one JSON-RPC line from stdin."""
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            error_response = JSONRPCHandler.create_error_response(
                None, PARSE_ERROR, f"Parse error: {str(e)}"
            )
            await self._write(error_response)
            return

        try:
            response = await self.mcp_server.handle_message(data)
        except ValueError as e:
            response = JSONRPCHandler.create_error_response(
                None, INVALID_REQUEST, f"Invalid request: {str(e)}"
            )
        except Exception as e:
            logger.error(event="message_handle_error", error=str(e))
            response = JSONRPCHandler.create_error_response(
                None, INTERNAL_ERROR, f"Internal error: {str(e)}"
            )

        if response is not None:
            await self._write(response)

    async def _write(self, payload: Any) -> None:
        """Write one JSON-RPC line to stdout."""
        message = encode(payload)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self.executor, self._write_line, message)

    def _write_line(self, message: str) -> None:
        self.stdout.write(message + "\n")
        self.stdout.flush()
