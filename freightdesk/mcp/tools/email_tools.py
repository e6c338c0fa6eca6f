"""Email tools: record, query, process and send case email."""

from typing import Annotated, Any

from fastmcp import Context
from pydantic import Field

from freightdesk.mcp.utils import run_operation, supplied


async def add_email(
    shipment_id: str,
    type: str,
    from_email: str,
    to_email: str,
    subject: str,
    body: str,
    ctx: Context,
    thread_id: str | None = None,
    from_name: str | None = None,
    to_name: str | None = None,
    direction: str | None = None,
    badge: str | None = None,
    parsed_data: dict[str, Any] | None = None,
) -> dict:
    """Add email record to database.

    Args:
        shipment_id: Shipment ID
        type: customer_request, wilson_rfq, carrier_quote, wilson_analysis,
            booking_confirmation, tracking_update or wilson_notification
        from_email: Sender address
        to_email: Recipient address
        subject: Subject line
        body: Message body
        thread_id: Correspondence thread key
        direction: inbound or outbound
        badge: NEW, QUOTE, RECOMMEND, BOOKED or URGENT
        parsed_data: Structured data extracted from the email

    Returns:
        Dictionary with email_id and created_at.
    """
    return await run_operation(
        ctx,
        "add_email",
        supplied(
            shipment_id=shipment_id,
            type=type,
            from_email=from_email,
            to_email=to_email,
            subject=subject,
            body=body,
            thread_id=thread_id,
            from_name=from_name,
            to_name=to_name,
            direction=direction,
            badge=badge,
            parsed_data=parsed_data,
        ),
    )


async def get_emails(shipment_id: str, ctx: Context, type: str | None = None) -> dict:
    """Get emails for a shipment, newest first, optionally of one type."""
    return await run_operation(ctx, "get_emails", supplied(shipment_id=shipment_id, type=type))


async def get_unprocessed_emails(ctx: Context, limit: int | None = None) -> dict:
    """Get unprocessed freight request emails, oldest first.

    Args:
        limit: Max number of results (default 50)
    """
    return await run_operation(ctx, "get_unprocessed_emails", supplied(limit=limit))


async def mark_email_processed(email_id: int, ctx: Context) -> dict:
    """Mark an email as processed. Safe to repeat."""
    return await run_operation(ctx, "mark_email_processed", {"email_id": email_id})


async def send_email(
    shipment_id: str,
    from_address: Annotated[str, Field(alias="from")],
    to_address: Annotated[str, Field(alias="to")],
    subject: str,
    body: str,
    type: str,
    ctx: Context,
) -> dict:
    """Send email via Resend API and record it on the shipment.

    The sender must be an approved company address. Callers pass the
    addresses as "from" and "to".

    Args:
        shipment_id: Shipment the email belongs to
        from: Sender (approved company address)
        to: Recipient
        subject: Subject line
        body: HTML or plain-text body
        type: Email type, as for add_email

    Returns:
        Dictionary with success, email_id, provider_message_id and error.
        success is false with provider_message_id set when the email went
        out but could not be recorded.
    """
    await ctx.info(f"Sending email to {to_address} for {shipment_id}")
    return await run_operation(
        ctx,
        "send_email",
        {
            "shipment_id": shipment_id,
            "from": from_address,
            "to": to_address,
            "subject": subject,
            "body": body,
            "type": type,
        },
    )
