"""
Model Context Protocol (MCP) server for user management.

Exposes create/update/delete/get tools, user resources and prompt
templates over JSON-RPC 2.0.
"""
