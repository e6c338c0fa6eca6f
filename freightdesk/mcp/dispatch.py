"""Operation registry and dispatch.

Maps every operation name to its request model and handler. dispatch()
turns an untyped argument bag into the operation's request model,
runs the handler and returns a JSON-ready dict. The MCP tools and the
`freightdesk call` command both go through here.

Example:
    result = await dispatch(
        "get_quotes", {"shipment_id": "CART-2025-00001"}, services
    )
    result["quotes"][0]["carrier_name"]
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pydantic
from pydantic import BaseModel

from freightdesk.errors import ValidationError
from freightdesk.schemas import (
    AddChatMessageRequest,
    AddEmailRequest,
    AddQuoteRequest,
    CreateShipmentRequest,
    FindOpenShipmentRequest,
    GetChatHistoryRequest,
    GetEmailsRequest,
    GetQuotesRequest,
    GetShipmentRequest,
    GetUnprocessedEmailsRequest,
    ListShipmentsRequest,
    MarkEmailProcessedRequest,
    SelectQuoteRequest,
    SendEmailRequest,
    UpdateShipmentRequest,
)
from freightdesk.services.provider import FreightServices

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
    """One named lifecycle operation.

    Attributes:
        name: Operation (and tool) name.
        request_model: Pydantic model the arguments are parsed into.
        handler: Takes (services, request) and returns a pydantic result.
            Synchronous handlers run in a worker thread.
        description: One-line summary shown by `freightdesk tools`.
        is_async: Whether handler returns an awaitable.
    """

    name: str
    request_model: type[BaseModel]
    handler: Callable[[FreightServices, Any], Any]
    description: str
    is_async: bool = False


_OPERATION_LIST = [
    Operation(
        "create_shipment",
        CreateShipmentRequest,
        lambda s, r: s.shipments.create_shipment(r),
        "Create a new shipment in status pending",
    ),
    Operation(
        "get_shipment",
        GetShipmentRequest,
        lambda s, r: s.shipments.get_shipment(r),
        "Get a shipment with its quotes, emails and chat history",
    ),
    Operation(
        "update_shipment",
        UpdateShipmentRequest,
        lambda s, r: s.shipments.update_shipment(r),
        "Update the supplied fields of a shipment",
    ),
    Operation(
        "list_shipments",
        ListShipmentsRequest,
        lambda s, r: s.shipments.list_shipments(r),
        "List shipments, newest first, with optional status/customer filters",
    ),
    Operation(
        "add_quote",
        AddQuoteRequest,
        lambda s, r: s.quotes.add_quote(r),
        "Attach a carrier quote to a shipment",
    ),
    Operation(
        "get_quotes",
        GetQuotesRequest,
        lambda s, r: s.quotes.get_quotes(r),
        "List a shipment's quotes, cheapest first",
    ),
    Operation(
        "select_quote",
        SelectQuoteRequest,
        lambda s, r: s.quotes.select_quote(r),
        "Select a quote and book the shipment with it",
    ),
    Operation(
        "add_email",
        AddEmailRequest,
        lambda s, r: s.emails.add_email(r),
        "Record an email on a shipment",
    ),
    Operation(
        "get_emails",
        GetEmailsRequest,
        lambda s, r: s.emails.get_emails(r),
        "List a shipment's emails, newest first",
    ),
    Operation(
        "get_unprocessed_emails",
        GetUnprocessedEmailsRequest,
        lambda s, r: s.emails.get_unprocessed_emails(r),
        "List emails not yet processed, oldest first",
    ),
    Operation(
        "mark_email_processed",
        MarkEmailProcessedRequest,
        lambda s, r: s.emails.mark_email_processed(r),
        "Mark an email as processed",
    ),
    Operation(
        "find_open_shipment_by_customer",
        FindOpenShipmentRequest,
        lambda s, r: s.shipments.find_open_shipment_by_customer(r),
        "Find a customer's most recent pending or quoted shipment",
    ),
    Operation(
        "send_email",
        SendEmailRequest,
        lambda s, r: s.outbound.send_email(r),
        "Send an email through the mail provider and record it",
        is_async=True,
    ),
    Operation(
        "add_chat_message",
        AddChatMessageRequest,
        lambda s, r: s.chat.add_chat_message(r),
        "Append a chat message to a shipment",
    ),
    Operation(
        "get_chat_history",
        GetChatHistoryRequest,
        lambda s, r: s.chat.get_chat_history(r),
        "Get a shipment's chat history, oldest first",
    ),
]

OPERATIONS: dict[str, Operation] = {op.name: op for op in _OPERATION_LIST}


def parse_request(model: type[BaseModel], arguments: dict[str, Any] | None) -> BaseModel:
    """Parse an argument bag into a request model.

    Raises:
        ValidationError: Code E-2002, naming the first offending argument.
    """
    try:
        return model.model_validate(arguments or {})
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        if first["type"] == "missing":
            message = f"Missing required argument: {field}"
        elif first["type"] == "extra_forbidden":
            message = f"Unknown argument: {field}"
        else:
            message = f"Invalid {field}: {first['msg']}"
        raise ValidationError(message, field=field, code="E-2002") from e


async def dispatch(
    name: str,
    arguments: dict[str, Any] | None,
    services: FreightServices,
) -> dict[str, Any]:
    """Run one operation by name.

    Args:
        name: Operation name, a key of OPERATIONS.
        arguments: Raw arguments. Keys not in the request model are rejected.
        services: The service container.

    Returns:
        The operation result as a JSON-compatible dict.

    Raises:
        DomainError: Unknown operation, bad arguments, missing records or
            store failures.
    """
    operation = OPERATIONS.get(name)
    if operation is None:
        raise ValidationError(f"Unknown tool: {name}", field="name", code="E-2003")

    request = parse_request(operation.request_model, arguments)
    logger.debug("Dispatching %s", name)

    if operation.is_async:
        result = await operation.handler(services, request)
    else:
        result = await asyncio.to_thread(operation.handler, services, request)
    return result.model_dump(mode="json")
