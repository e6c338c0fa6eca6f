"""Quote tools."""

from typing import Any

from fastmcp import Context

from freightdesk.mcp.utils import run_operation, supplied


async def add_quote(
    shipment_id: str,
    carrier_name: str,
    carrier_email: str,
    total_cost: float,
    base_rate: float,
    fuel_surcharge: float,
    transit_days: int,
    service_type: str,
    ctx: Context,
    price_breakdown: dict[str, Any] | None = None,
    otif_score: float | None = None,
    quote_valid_until: str | None = None,
    notes: str | None = None,
) -> dict:
    """Add a carrier quote for a shipment.

    A pending shipment moves to quoted.

    Args:
        shipment_id: Shipment ID
        carrier_name: Carrier name
        carrier_email: Carrier contact email
        total_cost: Total quoted cost
        base_rate: Base rate
        fuel_surcharge: Fuel surcharge
        transit_days: Transit time in days
        service_type: LTL, FTL or Expedited
        price_breakdown: Itemized pricing as an object
        otif_score: On-time-in-full score, 0-100
        quote_valid_until: Expiry date (ISO 8601)
        notes: Free-text notes

    Returns:
        Dictionary with quote_id and created_at.
    """
    await ctx.info(f"Adding {carrier_name} quote to {shipment_id}")
    return await run_operation(
        ctx,
        "add_quote",
        supplied(
            shipment_id=shipment_id,
            carrier_name=carrier_name,
            carrier_email=carrier_email,
            total_cost=total_cost,
            base_rate=base_rate,
            fuel_surcharge=fuel_surcharge,
            transit_days=transit_days,
            service_type=service_type,
            price_breakdown=price_breakdown,
            otif_score=otif_score,
            quote_valid_until=quote_valid_until,
            notes=notes,
        ),
    )


async def get_quotes(shipment_id: str, ctx: Context) -> dict:
    """Get all quotes for a shipment, cheapest first."""
    return await run_operation(ctx, "get_quotes", {"shipment_id": shipment_id})


async def select_quote(quote_id: str, shipment_id: str, ctx: Context) -> dict:
    """Mark a quote as selected and book the shipment with it.

    Args:
        quote_id: Quote ID (quote-<carrier>-NNN)
        shipment_id: Shipment the quote belongs to

    Returns:
        Dictionary with success and the selected quote.
    """
    await ctx.info(f"Selecting {quote_id} for {shipment_id}")
    return await run_operation(
        ctx, "select_quote", {"quote_id": quote_id, "shipment_id": shipment_id}
    )
