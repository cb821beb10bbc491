"""
MCP transports: stdio (default) and HTTP.
"""

from .stdio import StdioTransport
from .http import create_http_app

__all__ = ["StdioTransport", "create_http_app"]
