"""MCP tool functions, one module per aggregate."""
