"""Pydantic schemas for tool requests, records and results.

This module defines the data contracts at the tool-call boundary:

- Records: read-only views of the four stored entities, built from ORM
  objects with from_attributes.
- Requests: one model per operation. Unknown arguments are rejected
  (extra="forbid"); field-level business rules (email shape, ID format,
  enum membership, positivity) are checked by the services so that their
  messages name the offending field.
- Results: the shapes each operation returns.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# Records


class ShipmentRecord(BaseModel):
    """A shipment row as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_email: str
    customer_name: str
    status: str
    pickup_address: str
    pickup_date: str | None = None
    delivery_address: str
    delivery_date: str | None = None
    cargo_type: str | None = None
    load_type: str | None = None
    weight_kg: float | None = None
    volume_cbm: float | None = None
    loading_requirements: str | None = None
    unloading_requirements: str | None = None
    special_notes: str | None = None
    cargo_details: dict[str, Any] | None = None
    priority: str | None = None
    assigned_agent: str | None = None
    selected_carrier: str | None = None
    total_cost: float | None = None
    created_at: str
    updated_at: str


class QuoteRecord(BaseModel):
    """A carrier quote row as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    shipment_id: str
    carrier_name: str
    carrier_email: str
    total_cost: float
    base_rate: float
    fuel_surcharge: float
    price_breakdown: dict[str, Any] | None = None
    transit_days: int
    otif_score: float | None = None
    service_type: str
    is_selected: bool
    is_recommended: bool
    quote_valid_until: str | None = None
    notes: str | None = None
    created_at: str


class EmailRecord(BaseModel):
    """An email row as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    shipment_id: str
    thread_id: str | None = None
    type: str
    from_email: str
    from_name: str | None = None
    to_email: str
    to_name: str | None = None
    subject: str
    body: str
    preview: str
    direction: str | None = None
    badge: str | None = None
    parsed_data: dict[str, Any] | None = None
    processed: bool
    created_at: str


class ChatMessageRecord(BaseModel):
    """A chat message row as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    shipment_id: str
    role: str
    message: str
    metadata: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("message_metadata", "metadata"),
    )
    created_at: str


# Requests


class _Request(BaseModel):
    """Base for operation arguments: unknown fields are an error."""

    model_config = ConfigDict(extra="forbid")


class CreateShipmentRequest(_Request):
    customer_email: str
    customer_name: str
    pickup_address: str
    delivery_address: str
    pickup_date: str | None = None
    delivery_date: str | None = None
    cargo_type: str | None = None
    load_type: str | None = None
    weight_kg: float | None = None
    volume_cbm: float | None = None
    loading_requirements: str | None = None
    unloading_requirements: str | None = None
    special_notes: str | None = None
    cargo_details: dict[str, Any] | None = None
    priority: str | None = None
    assigned_agent: str | None = None


class GetShipmentRequest(_Request):
    shipment_id: str


class UpdateShipmentRequest(_Request):
    """Partial update. Only fields the caller supplied are written."""

    shipment_id: str
    status: str | None = None
    selected_carrier: str | None = None
    total_cost: float | None = None
    pickup_address: str | None = None
    pickup_date: str | None = None
    delivery_address: str | None = None
    delivery_date: str | None = None
    cargo_type: str | None = None
    load_type: str | None = None
    weight_kg: float | None = None
    volume_cbm: float | None = None
    loading_requirements: str | None = None
    unloading_requirements: str | None = None
    special_notes: str | None = None
    cargo_details: dict[str, Any] | None = None
    priority: str | None = None
    assigned_agent: str | None = None


class ListShipmentsRequest(_Request):
    status: str | None = None
    customer_email: str | None = None
    limit: int | None = None
    offset: int | None = None


class AddQuoteRequest(_Request):
    shipment_id: str
    carrier_name: str
    carrier_email: str
    total_cost: float
    base_rate: float
    fuel_surcharge: float
    transit_days: int
    service_type: str
    price_breakdown: dict[str, Any] | None = None
    otif_score: float | None = None
    quote_valid_until: str | None = None
    notes: str | None = None


class GetQuotesRequest(_Request):
    shipment_id: str


class SelectQuoteRequest(_Request):
    quote_id: str
    shipment_id: str


class AddEmailRequest(_Request):
    shipment_id: str
    type: str
    from_email: str
    to_email: str
    subject: str
    body: str
    thread_id: str | None = None
    from_name: str | None = None
    to_name: str | None = None
    direction: str | None = None
    badge: str | None = None
    parsed_data: dict[str, Any] | None = None


class GetEmailsRequest(_Request):
    shipment_id: str
    type: str | None = None


class GetUnprocessedEmailsRequest(_Request):
    limit: int | None = None


class MarkEmailProcessedRequest(_Request):
    email_id: int


class FindOpenShipmentRequest(_Request):
    customer_email: str


class SendEmailRequest(_Request):
    """Outbound email. from_address/to_address accept "from"/"to" too."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    shipment_id: str
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    subject: str
    body: str
    type: str


class AddChatMessageRequest(_Request):
    shipment_id: str
    role: str
    message: str
    metadata: dict[str, Any] | None = None


class GetChatHistoryRequest(_Request):
    shipment_id: str
    limit: int | None = None


# Results


class CreateShipmentResult(BaseModel):
    shipment_id: str
    created_at: str


class ShipmentDetail(BaseModel):
    """A shipment with every related record."""

    shipment: ShipmentRecord
    quotes: list[QuoteRecord]
    emails: list[EmailRecord]
    chat_messages: list[ChatMessageRecord]


class UpdateShipmentResult(BaseModel):
    success: bool = True
    updated_shipment: ShipmentRecord


class ShipmentPage(BaseModel):
    shipments: list[ShipmentRecord]
    total: int


class AddQuoteResult(BaseModel):
    quote_id: str
    created_at: str


class QuoteList(BaseModel):
    quotes: list[QuoteRecord]


class SelectQuoteResult(BaseModel):
    success: bool = True
    selected_quote: QuoteRecord


class AddEmailResult(BaseModel):
    email_id: int
    created_at: str


class EmailList(BaseModel):
    emails: list[EmailRecord]


class MarkEmailProcessedResult(BaseModel):
    success: bool = True


class OpenShipmentResult(BaseModel):
    shipment_id: str | None = None


class SendEmailResult(BaseModel):
    """Outcome of send_email.

    success is True only when the provider accepted the message AND it was
    recorded locally. When the provider accepted it but recording failed,
    success is False while provider_message_id is still set: the email
    went out even though local state is missing it.
    """

    success: bool
    email_id: int | None = None
    provider_message_id: str | None = None
    error: str | None = None
    error_code: str | None = None


class AddChatMessageResult(BaseModel):
    message_id: int
    created_at: str


class ChatHistory(BaseModel):
    messages: list[ChatMessageRecord]
