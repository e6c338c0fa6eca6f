"""Error formatting for tool responses and CLI display.

This module provides:
- format_error: structured payload for a DomainError (sent to MCP clients)
- format_error_text: multi-line rendering for humans
- to_tool_error: FastMCP ToolError carrying the JSON payload
"""

import json
from typing import Any

from fastmcp.exceptions import ToolError

from freightdesk.errors.domain import (
    DomainError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from freightdesk.errors.registry import get_error


def format_error(error: DomainError) -> dict[str, Any]:
    """Build the structured error payload for a domain error.

    Args:
        error: The DomainError to format.

    Returns:
        Dict with code, kind, title, message, remediation, retryable flag
        and kind-specific details.
    """
    error_def = get_error(error.code)
    details: dict[str, Any] = {}
    if isinstance(error, ValidationError) and error.field:
        details["field"] = error.field
    elif isinstance(error, NotFoundError):
        details["resource_type"] = error.resource_type
        details["identifier"] = error.identifier
    elif isinstance(error, PersistenceError):
        details["operation"] = error.operation

    return {
        "code": error.code,
        "kind": error.kind.value,
        "title": error_def.title if error_def else "Error",
        "message": error.message,
        "remediation": error_def.remediation if error_def else "Contact support.",
        "is_retryable": error_def.is_retryable if error_def else False,
        "details": details,
    }


def format_error_text(error: DomainError, include_remediation: bool = True) -> str:
    """Format error for display to a person.

    Args:
        error: The DomainError to format.
        include_remediation: Whether to include remediation steps.

    Returns:
        Multi-line formatted string.
    """
    payload = format_error(error)
    lines = [f"{payload['code']}: {payload['message']}"]
    field = payload["details"].get("field")
    if field:
        lines.append(f"  Field: {field}")
    if include_remediation:
        lines.append(f"  Action: {payload['remediation']}")
    return "\n".join(lines)


def to_tool_error(error: DomainError) -> ToolError:
    """Wrap a domain error as a FastMCP ToolError with a JSON payload."""
    return ToolError(json.dumps(format_error(error)))
