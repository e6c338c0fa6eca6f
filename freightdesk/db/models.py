"""SQLAlchemy ORM models for the FreightDesk store.

Defines the four durable entities (shipments, quotes, emails, chat
messages) and the enumerations their string columns are constrained to.
Uses SQLAlchemy 2.0 style with Mapped and mapped_column.

Quotes, emails and chat messages reference their shipment by id only;
there are no ORM relationships because every read is an independent query.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now_iso() -> str:
    """Generate current UTC timestamp in ISO8601 format."""
    return datetime.now(UTC).isoformat()


# Enums matching the allowed column values


class ShipmentStatus(str, Enum):
    """Status values for a shipment case.

    Lifecycle: pending -> quoted (first quote attached) -> booked (quote
    selected). in_transit, delivered and cancelled are set freely through
    update_shipment; no ordering is enforced.
    """

    pending = "pending"
    quoted = "quoted"
    booked = "booked"
    in_transit = "in_transit"
    delivered = "delivered"
    cancelled = "cancelled"


# A customer's shipment is "open" until a quote has been booked.
OPEN_SHIPMENT_STATUSES = (ShipmentStatus.pending.value, ShipmentStatus.quoted.value)


class ShipmentPriority(str, Enum):
    """Priority tags for shipments."""

    urgent = "urgent"
    standard = "standard"
    economy = "economy"


class ServiceType(str, Enum):
    """Carrier service levels a quote can be offered at."""

    LTL = "LTL"
    FTL = "FTL"
    Expedited = "Expedited"


class EmailType(str, Enum):
    """Semantic category of an email on a shipment case."""

    customer_request = "customer_request"
    wilson_rfq = "wilson_rfq"
    carrier_quote = "carrier_quote"
    wilson_analysis = "wilson_analysis"
    booking_confirmation = "booking_confirmation"
    tracking_update = "tracking_update"
    wilson_notification = "wilson_notification"


class EmailDirection(str, Enum):
    """Whether an email was received or sent."""

    inbound = "inbound"
    outbound = "outbound"


class EmailBadge(str, Enum):
    """UI badge shown next to an email."""

    NEW = "NEW"
    QUOTE = "QUOTE"
    RECOMMEND = "RECOMMEND"
    BOOKED = "BOOKED"
    URGENT = "URGENT"


class ChatRole(str, Enum):
    """Author of a chat turn."""

    user = "user"
    assistant = "assistant"
    system = "system"


# SQLAlchemy Base


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Models


class Shipment(Base):
    """Freight booking case, the aggregate root for quotes, emails and chat.

    Attributes:
        id: Human-readable identifier (CART-YYYY-NNNNN), immutable
        customer_email: Customer contact address
        customer_name: Customer display name
        status: Current ShipmentStatus value
        pickup_address: Origin address
        pickup_date: ISO8601 pickup date, if known
        delivery_address: Destination address
        delivery_date: ISO8601 delivery date, if known
        cargo_type: Free-form cargo category
        load_type: Free-form load category (e.g. pallets, container)
        weight_kg: Cargo weight in kilograms
        volume_cbm: Cargo volume in cubic metres
        loading_requirements: Requirements at pickup
        unloading_requirements: Requirements at delivery
        special_notes: Free-text notes
        cargo_details: JSON bag for cargo fields not promoted to columns
        priority: ShipmentPriority value
        assigned_agent: Tag of the agent handling the case
        selected_carrier: Carrier of the selected quote (set on booking)
        total_cost: Cost of the selected quote (set on booking)
        created_at: ISO8601 timestamp of creation
        updated_at: ISO8601 timestamp of last update
    """

    __tablename__ = "shipments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ShipmentStatus.pending.value
    )

    # Route
    pickup_address: Mapped[str] = mapped_column(Text, nullable=False)
    pickup_date: Mapped[str | None] = mapped_column(String(50), nullable=True)
    delivery_address: Mapped[str] = mapped_column(Text, nullable=False)
    delivery_date: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Structured cargo fields
    cargo_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    load_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    volume_cbm: Mapped[float | None] = mapped_column(Float, nullable=True)
    loading_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    unloading_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    special_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    cargo_details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Case handling
    priority: Mapped[str | None] = mapped_column(String(20), nullable=True)
    assigned_agent: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Booking outcome (only populated once a quote is selected)
    selected_carrier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_cost: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Timestamps (ISO8601 strings for SQLite compatibility)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso, onupdate=utc_now_iso
    )

    __table_args__ = (
        Index("idx_shipments_status", "status"),
        Index("idx_shipments_customer_email", "customer_email"),
        Index("idx_shipments_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Shipment(id={self.id!r}, status={self.status!r})>"


class Quote(Base):
    """One carrier's price and terms offer against a shipment.

    Quotes are append-only. At most one quote per shipment has
    is_selected set at any moment.
    """

    __tablename__ = "quotes"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    shipment_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("shipments.id"), nullable=False
    )
    carrier_name: Mapped[str] = mapped_column(String(255), nullable=False)
    carrier_email: Mapped[str] = mapped_column(String(320), nullable=False)

    # Pricing
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)
    base_rate: Mapped[float] = mapped_column(Float, nullable=False)
    fuel_surcharge: Mapped[float] = mapped_column(Float, nullable=False)
    price_breakdown: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )

    # Service terms
    transit_days: Mapped[int] = mapped_column(Integer, nullable=False)
    otif_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    service_type: Mapped[str] = mapped_column(String(20), nullable=False)

    is_selected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_recommended: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    quote_valid_until: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    __table_args__ = (Index("idx_quotes_shipment_id", "shipment_id"),)

    def __repr__(self) -> str:
        return (
            f"<Quote(id={self.id!r}, shipment_id={self.shipment_id!r}, "
            f"selected={self.is_selected!r})>"
        )


class Email(Base):
    """A message on a shipment's case.

    preview is always the first 100 characters of body, computed at
    write time. processed starts False and is flipped by
    mark_email_processed.
    """

    __tablename__ = "emails"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shipment_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("shipments.id"), nullable=False
    )
    thread_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False)

    from_email: Mapped[str] = mapped_column(String(320), nullable=False)
    from_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    to_email: Mapped[str] = mapped_column(String(320), nullable=False)
    to_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    subject: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    preview: Mapped[str] = mapped_column(String(100), nullable=False)

    direction: Mapped[str | None] = mapped_column(String(20), nullable=True)
    badge: Mapped[str | None] = mapped_column(String(20), nullable=True)
    parsed_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    __table_args__ = (
        Index("idx_emails_shipment_id", "shipment_id"),
        Index("idx_emails_processed", "processed"),
    )

    def __repr__(self) -> str:
        return f"<Email(id={self.id!r}, type={self.type!r}, processed={self.processed!r})>"


class ChatMessage(Base):
    """One turn of an assistant conversation on a shipment. Append-only."""

    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shipment_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("shipments.id"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    message_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True
    )
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    __table_args__ = (Index("idx_chat_messages_shipment_id", "shipment_id"),)

    def __repr__(self) -> str:
        return f"<ChatMessage(id={self.id!r}, role={self.role!r})>"
