"""Chat history tools."""

from typing import Any

from fastmcp import Context

from freightdesk.mcp.utils import run_operation, supplied


async def add_chat_message(
    shipment_id: str,
    role: str,
    message: str,
    ctx: Context,
    metadata: dict[str, Any] | None = None,
) -> dict:
    """Add message to chat history.

    Args:
        shipment_id: Shipment ID
        role: user, assistant or system
        message: Message text
        metadata: Optional structured metadata
    """
    return await run_operation(
        ctx,
        "add_chat_message",
        supplied(shipment_id=shipment_id, role=role, message=message, metadata=metadata),
    )


async def get_chat_history(shipment_id: str, ctx: Context, limit: int | None = None) -> dict:
    """Get chat conversation for a shipment, oldest first.

    Args:
        shipment_id: Shipment ID
        limit: Max number of messages (default 100)
    """
    return await run_operation(
        ctx, "get_chat_history", supplied(shipment_id=shipment_id, limit=limit)
    )
