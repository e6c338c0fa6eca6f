"""Helpers shared by the MCP tool functions."""

from typing import Any

from fastmcp import Context

from freightdesk.errors import DomainError, to_tool_error
from freightdesk.mcp.dispatch import dispatch
from freightdesk.services.provider import FreightServices


def get_services(ctx: Context) -> FreightServices:
    """Get the service container from the lifespan context.

    Raises:
        RuntimeError: If request context not available.
    """
    if ctx.request_context is None:
        raise RuntimeError("Request context not available")
    return ctx.request_context.lifespan_context["services"]


def supplied(**arguments: Any) -> dict[str, Any]:
    """Drop arguments the caller left unset (None)."""
    return {key: value for key, value in arguments.items() if value is not None}


async def run_operation(ctx: Context, name: str, arguments: dict[str, Any]) -> dict:
    """Dispatch an operation and surface domain errors as ToolError."""
    services = get_services(ctx)
    try:
        return await dispatch(name, arguments, services)
    except DomainError as e:
        await ctx.warning(f"{name} failed: {e.message}")
        raise to_tool_error(e) from e
