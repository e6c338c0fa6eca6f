"""MCP transport for FreightDesk: server, tools and operation dispatch."""

from freightdesk.mcp.dispatch import OPERATIONS, Operation, dispatch, parse_request
from freightdesk.mcp.server import create_server, run_server

__all__ = [
    "OPERATIONS",
    "Operation",
    "dispatch",
    "parse_request",
    "create_server",
    "run_server",
]
