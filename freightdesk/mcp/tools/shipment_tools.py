"""Shipment tools: create, read, update, list, and open-case lookup."""

from typing import Any

from fastmcp import Context

from freightdesk.mcp.utils import run_operation, supplied


async def create_shipment(
    customer_email: str,
    customer_name: str,
    pickup_address: str,
    delivery_address: str,
    ctx: Context,
    pickup_date: str | None = None,
    delivery_date: str | None = None,
    cargo_type: str | None = None,
    load_type: str | None = None,
    weight_kg: float | None = None,
    volume_cbm: float | None = None,
    loading_requirements: str | None = None,
    unloading_requirements: str | None = None,
    special_notes: str | None = None,
    cargo_details: dict[str, Any] | None = None,
    priority: str | None = None,
    assigned_agent: str | None = None,
) -> dict:
    """Create a new freight shipment record.

    Args:
        customer_email: Customer email address
        customer_name: Customer name
        pickup_address: Pickup location address
        delivery_address: Delivery location address
        pickup_date: Pickup date (ISO 8601)
        delivery_date: Delivery date (ISO 8601)
        cargo_type: Type of cargo
        load_type: Load type (e.g. pallets, container)
        weight_kg: Weight in kilograms
        volume_cbm: Volume in cubic metres
        loading_requirements: Requirements at pickup
        unloading_requirements: Requirements at delivery
        special_notes: Free-text notes
        cargo_details: Extra cargo fields as an object
        priority: urgent, standard or economy
        assigned_agent: Agent handling the case

    Returns:
        Dictionary with shipment_id (CART-YYYY-NNNNN) and created_at.
    """
    await ctx.info(f"Creating shipment for {customer_email}")
    return await run_operation(
        ctx,
        "create_shipment",
        supplied(
            customer_email=customer_email,
            customer_name=customer_name,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            pickup_date=pickup_date,
            delivery_date=delivery_date,
            cargo_type=cargo_type,
            load_type=load_type,
            weight_kg=weight_kg,
            volume_cbm=volume_cbm,
            loading_requirements=loading_requirements,
            unloading_requirements=unloading_requirements,
            special_notes=special_notes,
            cargo_details=cargo_details,
            priority=priority,
            assigned_agent=assigned_agent,
        ),
    )


async def get_shipment(shipment_id: str, ctx: Context) -> dict:
    """Get shipment details by ID, with quotes, emails and chat history.

    Args:
        shipment_id: Shipment ID (CART-YYYY-NNNNN)
    """
    await ctx.info(f"Fetching shipment {shipment_id}")
    return await run_operation(ctx, "get_shipment", {"shipment_id": shipment_id})


async def update_shipment(
    shipment_id: str,
    ctx: Context,
    status: str | None = None,
    selected_carrier: str | None = None,
    total_cost: float | None = None,
    pickup_address: str | None = None,
    pickup_date: str | None = None,
    delivery_address: str | None = None,
    delivery_date: str | None = None,
    cargo_type: str | None = None,
    load_type: str | None = None,
    weight_kg: float | None = None,
    volume_cbm: float | None = None,
    loading_requirements: str | None = None,
    unloading_requirements: str | None = None,
    special_notes: str | None = None,
    cargo_details: dict[str, Any] | None = None,
    priority: str | None = None,
    assigned_agent: str | None = None,
) -> dict:
    """Update shipment fields. Only the fields passed are changed.

    Args:
        shipment_id: Shipment ID
        status: pending, quoted, booked, in_transit, delivered or cancelled

    Returns:
        Dictionary with success and the updated shipment.
    """
    await ctx.info(f"Updating shipment {shipment_id}")
    return await run_operation(
        ctx,
        "update_shipment",
        supplied(
            shipment_id=shipment_id,
            status=status,
            selected_carrier=selected_carrier,
            total_cost=total_cost,
            pickup_address=pickup_address,
            pickup_date=pickup_date,
            delivery_address=delivery_address,
            delivery_date=delivery_date,
            cargo_type=cargo_type,
            load_type=load_type,
            weight_kg=weight_kg,
            volume_cbm=volume_cbm,
            loading_requirements=loading_requirements,
            unloading_requirements=unloading_requirements,
            special_notes=special_notes,
            cargo_details=cargo_details,
            priority=priority,
            assigned_agent=assigned_agent,
        ),
    )


async def list_shipments(
    ctx: Context,
    status: str | None = None,
    customer_email: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict:
    """List shipments with optional filtering, newest first.

    Args:
        status: Filter by status
        customer_email: Filter by customer email
        limit: Max number of results (default 50)
        offset: Number of results to skip

    Returns:
        Dictionary with shipments and the total matching count.
    """
    return await run_operation(
        ctx,
        "list_shipments",
        supplied(status=status, customer_email=customer_email, limit=limit, offset=offset),
    )


async def find_open_shipment_by_customer(customer_email: str, ctx: Context) -> dict:
    """Find customer's most recent open (pending or quoted) shipment.

    Returns:
        Dictionary with shipment_id, or null when none is open.
    """
    return await run_operation(
        ctx, "find_open_shipment_by_customer", {"customer_email": customer_email}
    )
